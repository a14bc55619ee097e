# sleepquest/persistence/models.py
# -*- coding: utf-8 -*-
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Float, Date, DateTime, Boolean, ForeignKey, UniqueConstraint, func
import datetime as dt

class Base(DeclarativeBase):
    pass

class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    username: Mapped[str] = mapped_column(String(64), nullable=False)
    display_name: Mapped[str] = mapped_column(String(128), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=func.now(), nullable=False)

    entries = relationship("SleepEntry", back_populates="user", cascade="all, delete-orphan", lazy="selectin")
    badges = relationship("BadgeStateRecord", back_populates="user", cascade="all, delete-orphan", lazy="selectin")

class SleepEntry(Base):
    __tablename__ = "sleep_entries"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_user_night"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, index=True, nullable=False)

    bedtime: Mapped[str] = mapped_column(String(5), nullable=False)    # "HH:MM"
    waketime: Mapped[str] = mapped_column(String(5), nullable=False)
    quality_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    feeling: Mapped[str] = mapped_column(String(16), nullable=False)

    # dérivés, toujours recalculés à l'enregistrement
    duration: Mapped[float] = mapped_column(Float, nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=func.now(), nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="entries")

class BadgeStateRecord(Base):
    __tablename__ = "badge_states"
    __table_args__ = (UniqueConstraint("user_id", "badge_id", name="uq_user_badge"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    badge_id: Mapped[str] = mapped_column(String(64), nullable=False)
    is_earned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    progress: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    earned_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)

    user = relationship("User", back_populates="badges")

class Friendship(Base):
    """Lien d'amitié orienté ; une amitié acceptée est stockée dans les deux sens."""
    __tablename__ = "friendships"
    __table_args__ = (UniqueConstraint("user_id", "friend_id", name="uq_friendship"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    friend_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=func.now(), nullable=False)
