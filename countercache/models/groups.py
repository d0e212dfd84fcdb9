from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from countercache.db.base import Base
from countercache.models.enums import GroupRank


class Group(Base):
    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)

    members_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    leaders_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class GroupMember(Base):
    __tablename__ = "group_members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_id: Mapped[int] = mapped_column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rank: Mapped[int] = mapped_column(Integer, nullable=False, default=GroupRank.pleb.value)

    __table_args__ = (UniqueConstraint("group_id", "user_id", name="uq_group_members_group_user"),)
