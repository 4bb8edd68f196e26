"""
Progress Domain Models

DTOs for learning progress plus the pure rules behind login streaks and
completion percentages.
"""

from datetime import date, datetime
from typing import NamedTuple, Optional
from pydantic import Field

from app.domain.models import CamelModel


class ProgressStats(CamelModel):
    words_learned: int = 0
    words_learned_today: int = 0
    daily_login_streak: int = 0
    topics_completed: int = 0
    language_completion_percentage: float = 0.0
    total_words_in_language: int = 0


class TopicProgress(CamelModel):
    topic_id: int
    total_words: int
    words_learned: int
    is_completed: bool
    completion_percentage: float


class TrackWordRequest(CamelModel):
    vocabulary_id: int = Field(..., ge=1)
    target_language_code: str = Field(..., min_length=2, max_length=10)


class TrackWordResult(CamelModel):
    success: bool
    is_new_word: Optional[bool] = None
    error: Optional[str] = None
    completed_topic_ids: list[int] = Field(default_factory=list)


class CompletedTopicsResponse(CamelModel):
    completed_topic_ids: list[int]


class TopicPosition(CamelModel):
    """Where a learner stopped inside a topic."""
    current_word_index: int = 0
    total_words: int = 0
    last_accessed_at: Optional[datetime] = None


class TopicPositionUpdate(CamelModel):
    topic_id: int = Field(..., ge=1)
    target_language_code: str = Field(..., min_length=2, max_length=10)
    current_word_index: int = Field(..., ge=0)
    total_words: int = Field(..., ge=0)


# =============================================================================
# Rules
# =============================================================================

class Streak(NamedTuple):
    current: int
    longest: int
    changed: bool


def next_streak(
    current: int,
    longest: int,
    last_login: Optional[date],
    today: date,
) -> Streak:
    """
    Advance a daily login streak.

    First login starts at 1. A second login on the same day changes
    nothing. Logging in the day after extends the streak; any longer gap
    resets it to 1. The longest streak never decreases.
    """
    if last_login is None:
        return Streak(1, max(longest, 1), True)

    gap = (today - last_login).days
    if gap <= 0:
        return Streak(current, longest, False)

    new_current = current + 1 if gap == 1 else 1
    return Streak(new_current, max(longest, new_current), True)


def completion_percentage(learned: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(learned / total * 100, 2)
