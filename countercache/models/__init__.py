from countercache.models.users import User
from countercache.models.posts import Comment, Post, PostLike
from countercache.models.media import Anime, Drama, Manga
from countercache.models.library_entries import LibraryEntry
from countercache.models.favorites import Favorite
from countercache.models.groups import Group, GroupMember
from countercache.models.reviews import Review

__all__ = [
    "User",
    "Post",
    "PostLike",
    "Comment",
    "Anime",
    "Manga",
    "Drama",
    "LibraryEntry",
    "Favorite",
    "Group",
    "GroupMember",
    "Review",
]
