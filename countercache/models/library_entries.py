from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from countercache.db.base import Base
from countercache.models.enums import LibraryStatus

# Half-star steps from 0.5 to 5.0
VALID_RATINGS: tuple[Decimal, ...] = tuple((Decimal(n) / 2).quantize(Decimal("0.1")) for n in range(1, 11))


class LibraryEntry(Base):
    __tablename__ = "library_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    media_type: Mapped[str] = mapped_column(String(20), nullable=False)
    media_id: Mapped[int] = mapped_column(Integer, nullable=False)
    anime_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("anime.id"), nullable=True, index=True)
    manga_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("manga.id"), nullable=True, index=True)
    drama_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("dramas.id"), nullable=True, index=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default=LibraryStatus.planned.value)
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating: Mapped[Decimal | None] = mapped_column(Numeric(2, 1), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


Index("ix_library_entries_user_media", LibraryEntry.user_id, LibraryEntry.media_type, LibraryEntry.media_id, unique=True)
