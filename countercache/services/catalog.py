from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from countercache.core.errors import UnknownJobError
from countercache.db.store import CounterStore
from countercache.models import (
    Anime,
    Comment,
    Drama,
    Favorite,
    Group,
    GroupMember,
    LibraryEntry,
    Manga,
    Post,
    PostLike,
    Review,
    User,
)
from countercache.models.enums import GroupRank, MediaType
from countercache.models.library_entries import VALID_RATINGS
from countercache.services.executor import StatementOutcome, execute
from countercache.services.statements import (
    AssociationDescriptor,
    RatingFrequencyDescriptor,
    Statement,
    build_association_count_statements,
    build_rating_frequency_statements,
)

logger = logging.getLogger(__name__)

# A step builds one statement sequence for the store's dialect.
Step = Callable[[str], list[Statement]]


@dataclass(frozen=True)
class CounterJob:
    name: str
    description: str
    steps: tuple[tuple[str, Step], ...]


def count_of(
    owner,
    related,
    counter_column: str,
    *,
    foreign_key: str | None = None,
    where: str | None = None,
    polymorphic_as: str | None = None,
    type_name: str | None = None,
) -> tuple[str, Step]:
    """Step recounting ``owner.counter_column`` from ``related`` rows.

    The foreign key defaults to ``<owner>_id``. ``polymorphic_as`` names a
    polymorphic association (``item`` for ``item_type``/``item_id``) and
    ``type_name`` the discriminator value, by default the owner class name.
    """

    if polymorphic_as:
        foreign_key = f"{polymorphic_as}_id"
        type_name = type_name or owner.__name__
    elif foreign_key is None:
        foreign_key = f"{owner.__name__.lower()}_id"

    def step(_dialect: str) -> list[Statement]:
        descriptor = AssociationDescriptor(
            owning_table=owner.__tablename__,
            related_table=related.__tablename__,
            foreign_key=foreign_key,
            counter_column=counter_column,
            polymorphic_type_column=f"{polymorphic_as}_type" if polymorphic_as else None,
            polymorphic_type=type_name if polymorphic_as else None,
            where=where,
        )
        return build_association_count_statements(descriptor)

    return f"{owner.__tablename__}.{counter_column} from {related.__tablename__}", step


def rating_frequencies_of(media) -> tuple[str, Step]:
    def step(dialect: str) -> list[Statement]:
        descriptor = RatingFrequencyDescriptor(
            owning_table=media.__tablename__,
            foreign_key=f"{media.__name__.lower()}_id",
            valid_ratings=VALID_RATINGS,
            source_table=LibraryEntry.__tablename__,
        )
        return build_rating_frequency_statements(descriptor, dialect=dialect)

    return f"{media.__tablename__}.rating_frequencies from {LibraryEntry.__tablename__}", step


def _catalog() -> dict[str, CounterJob]:
    jobs = [
        CounterJob(
            name="posts",
            description="Likes, comments and top-level comments per post",
            steps=(
                count_of(Post, PostLike, "post_likes_count"),
                count_of(Post, Comment, "comments_count"),
                count_of(Post, Comment, "top_level_comments_count", where="parent_id IS NULL"),
            ),
        ),
        CounterJob(
            name="media_user_counts",
            description="Library entries per anime and manga",
            steps=(
                count_of(Anime, LibraryEntry, "user_count"),
                count_of(Manga, LibraryEntry, "user_count"),
            ),
        ),
        CounterJob(
            name="media_rating_frequencies",
            description="Rating distribution per anime, manga and drama",
            steps=(
                rating_frequencies_of(Anime),
                rating_frequencies_of(Manga),
                rating_frequencies_of(Drama),
            ),
        ),
        CounterJob(
            name="favorite_counts",
            description="Favorites per anime and manga",
            steps=(
                count_of(Anime, Favorite, "favorites_count", polymorphic_as="item", type_name=MediaType.anime.value),
                count_of(Manga, Favorite, "favorites_count", polymorphic_as="item", type_name=MediaType.manga.value),
            ),
        ),
        CounterJob(
            name="users",
            description="Ratings, likes given and favorites per user",
            steps=(
                count_of(User, LibraryEntry, "ratings_count", where="rating IS NOT NULL"),
                count_of(User, PostLike, "likes_given_count"),
                count_of(User, Favorite, "favorites_count"),
            ),
        ),
        CounterJob(
            name="groups",
            description="Members and leaders per group",
            steps=(
                count_of(Group, GroupMember, "members_count"),
                count_of(Group, GroupMember, "leaders_count", where=f"rank != {GroupRank.pleb.value}"),
            ),
        ),
        CounterJob(
            name="reviews",
            description="Reviews written per user",
            steps=(count_of(User, Review, "reviews_count"),),
        ),
    ]
    return {job.name: job for job in jobs}


JOBS: dict[str, CounterJob] = _catalog()


def get_job(name: str) -> CounterJob:
    job = JOBS.get(name)
    if job is None:
        raise UnknownJobError(name)
    return job


def run_job(store: CounterStore, job: CounterJob | str) -> list[StatementOutcome]:
    if isinstance(job, str):
        job = get_job(job)

    # A malformed step must fail before any earlier step touches the store.
    batches = [(title, step(store.dialect_name)) for title, step in job.steps]

    logger.info("Resetting counters: %s", job.name)
    outcomes: list[StatementOutcome] = []
    for title, statements in batches:
        outcomes.extend(execute(store, statements, title=title, job=f"{job.name}: {title}"))
    return outcomes


def run_jobs(store: CounterStore, names: Iterable[str]) -> dict[str, list[StatementOutcome]]:
    """Run jobs in the given order; unknown names fail before anything runs."""

    jobs = [get_job(name) for name in names]
    return {job.name: run_job(store, job) for job in jobs}
