from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from countercache.db.base import Base


class Review(Base):
    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    media_type: Mapped[str] = mapped_column(String(20), nullable=False)
    media_id: Mapped[int] = mapped_column(Integer, nullable=False)

    rating: Mapped[Decimal | None] = mapped_column(Numeric(2, 1), nullable=True)
    content: Mapped[str | None] = mapped_column(String(10000), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


Index("ix_reviews_media", Review.media_type, Review.media_id)
