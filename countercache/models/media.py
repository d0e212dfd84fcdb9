from __future__ import annotations

from sqlalchemy import JSON, Integer, String
from sqlalchemy.dialects.postgresql import HSTORE
from sqlalchemy.orm import Mapped, mapped_column

from countercache.db.base import Base

# hstore on PostgreSQL, JSON text elsewhere
RatingFrequencies = JSON().with_variant(HSTORE(), "postgresql")


class MediaMixin:
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    canonical_title: Mapped[str] = mapped_column(String(300), nullable=False, index=True)

    user_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    favorites_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating_frequencies: Mapped[dict] = mapped_column(RatingFrequencies, nullable=False, default=dict)


class Anime(MediaMixin, Base):
    __tablename__ = "anime"


class Manga(MediaMixin, Base):
    __tablename__ = "manga"


class Drama(MediaMixin, Base):
    __tablename__ = "dramas"
