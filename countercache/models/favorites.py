from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from countercache.db.base import Base


class Favorite(Base):
    """A user's favorite; ``item_type``/``item_id`` point at any media table."""

    __tablename__ = "favorites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    item_type: Mapped[str] = mapped_column(String(20), nullable=False)
    item_id: Mapped[int] = mapped_column(Integer, nullable=False)
    fav_rank: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


Index("ix_favorites_item", Favorite.item_type, Favorite.item_id)
