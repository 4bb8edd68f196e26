"""
Learning Progress SQLModels

Per-user progress tables. user_word_progress is the source of truth; the
topic, language and daily tables are aggregates maintained by
ProgressService whenever a new word is learned.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Date, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from app.infrastructure.db.models.base import utcnow


class UserWordProgress(SQLModel, table=True):
    """
    A word a user has played at least once in a target language.

    Table: user_word_progress
    """

    __tablename__ = "user_word_progress"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "vocabulary_id", "target_language_code",
            name="uq_user_word_progress",
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(..., index=True)
    vocabulary_id: int = Field(..., foreign_key="vocabulary.id", index=True)
    target_language_code: str = Field(..., max_length=10)
    play_count: int = Field(default=1)
    first_played_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    last_played_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class UserTopicCompletion(SQLModel, table=True):
    """Words learned per topic and language."""

    __tablename__ = "user_topic_completion"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "topic_id", "target_language_code",
            name="uq_user_topic_completion",
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(..., index=True)
    topic_id: int = Field(...)
    target_language_code: str = Field(..., max_length=10)
    words_learned: int = Field(default=0)
    total_words: int = Field(default=0)
    is_completed: bool = Field(default=False)
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class UserLanguageProgress(SQLModel, table=True):
    """Total words learned in a language, against the full vocabulary."""

    __tablename__ = "user_language_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "target_language_code", name="uq_user_language_progress"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(..., index=True)
    target_language_code: str = Field(..., max_length=10)
    total_words_learned: int = Field(default=0)
    completion_percentage: float = Field(default=0.0)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class UserDailyProgress(SQLModel, table=True):
    """New words learned per calendar day."""

    __tablename__ = "user_daily_progress"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "target_language_code", "activity_date",
            name="uq_user_daily_progress",
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(..., index=True)
    target_language_code: str = Field(..., max_length=10)
    activity_date: date = Field(..., sa_type=Date)
    words_learned_count: int = Field(default=0)


class UserLoginStreak(SQLModel, table=True):
    """Consecutive-day login streak, one row per user."""

    __tablename__ = "user_login_streaks"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(..., unique=True, index=True)
    current_streak: int = Field(default=0)
    longest_streak: int = Field(default=0)
    last_login_date: Optional[date] = Field(default=None, sa_type=Date)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class UserTopicPosition(SQLModel, table=True):
    """Reading position inside a topic, so learners resume where they stopped."""

    __tablename__ = "user_topic_positions"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "topic_id", "target_language_code",
            name="uq_user_topic_position",
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(..., index=True)
    topic_id: int = Field(...)
    target_language_code: str = Field(..., max_length=10)
    current_word_index: int = Field(default=0)
    total_words: int = Field(default=0)
    last_accessed_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
