from __future__ import annotations

from enum import Enum


class MediaType(str, Enum):
    # Values are the type names stored in polymorphic discriminator columns.
    anime = "Anime"
    manga = "Manga"
    drama = "Drama"


class LibraryStatus(str, Enum):
    current = "current"
    planned = "planned"
    completed = "completed"
    on_hold = "on_hold"
    dropped = "dropped"


class GroupRank(int, Enum):
    pleb = 0
    mod = 1
    admin = 2
