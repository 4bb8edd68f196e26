"""
Unit tests for ProgressService with repository doubles.
"""

from datetime import date, datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.domain.progress import ProgressStats
from app.infrastructure.services.progress_service import ProgressService


USER_ID = "11111111-2222-3333-4444-555555555555"


@pytest.fixture
def progress():
    repo = AsyncMock()
    repo.session = MagicMock()
    repo.session.rollback = AsyncMock()
    repo.get_word_progress.return_value = None
    repo.get_topic_completion.return_value = None
    repo.count_words_learned.return_value = 1
    return repo


@pytest.fixture
def vocabulary():
    repo = AsyncMock()
    repo.get_topic_id.return_value = 4
    repo.count_by_topic.return_value = 10
    repo.count.return_value = 200
    return repo


@pytest.fixture
def service(progress, vocabulary):
    return ProgressService(progress, vocabulary)


def _completion(topic_id, learned, total, completed=False, completed_at=None):
    return SimpleNamespace(
        topic_id=topic_id,
        words_learned=learned,
        total_words=total,
        is_completed=completed,
        completed_at=completed_at,
    )


class TestTrackWord:

    @pytest.mark.asyncio
    async def test_new_word_updates_aggregates(self, service, progress):
        result = await service.track_word_played(USER_ID, 42, "es")

        assert result.success is True
        assert result.is_new_word is True
        progress.add_word_progress.assert_awaited_once_with(USER_ID, 42, "es")
        progress.save_topic_completion.assert_awaited_once_with(USER_ID, 4, "es", 1, 10, None)
        progress.save_language_progress.assert_awaited_once_with(USER_ID, "es", 1, 0.5)
        progress.increment_daily.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_replay_only_bumps_count(self, service, progress):
        existing = SimpleNamespace(play_count=2)
        progress.get_word_progress.return_value = existing

        result = await service.track_word_played(USER_ID, 42, "es")

        assert result.is_new_word is False
        progress.record_replay.assert_awaited_once_with(existing)
        progress.add_word_progress.assert_not_called()
        progress.increment_daily.assert_not_called()

    @pytest.mark.asyncio
    async def test_last_word_completes_topic(self, service, progress):
        progress.get_topic_completion.return_value = _completion(4, 9, 10)

        await service.track_word_played(USER_ID, 42, "es")

        args = progress.save_topic_completion.await_args.args
        assert args[3] == 10
        assert isinstance(args[5], datetime)

    @pytest.mark.asyncio
    async def test_completion_time_is_kept(self, service, progress):
        done_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
        progress.get_topic_completion.return_value = _completion(4, 10, 10, True, done_at)

        await service.track_word_played(USER_ID, 42, "es")

        assert progress.save_topic_completion.await_args.args[5] == done_at

    @pytest.mark.asyncio
    async def test_word_without_topic(self, service, progress, vocabulary):
        vocabulary.get_topic_id.return_value = None

        result = await service.track_word_played(USER_ID, 42, "es")

        assert result.success is True
        progress.save_topic_completion.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_rolls_back(self, service, progress):
        progress.add_word_progress.side_effect = RuntimeError("constraint violated")

        result = await service.track_word_played(USER_ID, 42, "es")

        assert result.success is False
        assert result.error == "constraint violated"
        progress.session.rollback.assert_awaited_once()


class TestStats:

    @pytest.mark.asyncio
    async def test_stats(self, service, progress):
        progress.count_words_learned.return_value = 50
        progress.get_daily_count.return_value = 5
        progress.get_streak.return_value = SimpleNamespace(current_streak=3)
        progress.list_topic_completions.return_value = [
            _completion(1, 10, 10, True),
            _completion(2, 3, 10),
        ]

        stats = await service.get_progress_stats(USER_ID, "es")

        assert stats == ProgressStats(
            words_learned=50,
            words_learned_today=5,
            daily_login_streak=3,
            topics_completed=1,
            language_completion_percentage=25.0,
            total_words_in_language=200,
        )

    @pytest.mark.asyncio
    async def test_stats_fall_back_to_zeros(self, service, progress):
        progress.count_words_learned.side_effect = RuntimeError("db down")
        assert await service.get_progress_stats(USER_ID, "es") == ProgressStats()

    @pytest.mark.asyncio
    async def test_untouched_topic(self, service, vocabulary):
        topic = await service.get_topic_progress(USER_ID, 7, "es")
        assert topic.total_words == 10
        assert topic.words_learned == 0
        assert topic.is_completed is False

    @pytest.mark.asyncio
    async def test_completed_topic_ids(self, service, progress):
        progress.list_topic_completions.return_value = [
            _completion(1, 10, 10, True),
            _completion(2, 3, 10),
            _completion(5, 8, 8, True),
        ]
        assert await service.get_completed_topic_ids(USER_ID, "es") == [1, 5]

    @pytest.mark.asyncio
    async def test_all_topic_progress(self, service, progress):
        progress.list_topic_completions.return_value = [_completion(2, 3, 12)]
        [topic] = await service.get_all_topic_progress(USER_ID, "es")
        assert topic.completion_percentage == 25.0


class TestStreak:

    @pytest.mark.asyncio
    async def test_first_login(self, service, progress):
        progress.get_streak.return_value = None

        assert await service.update_login_streak(USER_ID, today=date(2026, 5, 10)) == 1
        progress.save_streak.assert_awaited_once_with(USER_ID, 1, 1, date(2026, 5, 10))

    @pytest.mark.asyncio
    async def test_same_day_not_saved(self, service, progress):
        progress.get_streak.return_value = SimpleNamespace(
            current_streak=4, longest_streak=6, last_login_date=date(2026, 5, 10)
        )

        assert await service.update_login_streak(USER_ID, today=date(2026, 5, 10)) == 4
        progress.save_streak.assert_not_called()


class TestPosition:

    @pytest.mark.asyncio
    async def test_default_position(self, service, progress):
        progress.get_position.return_value = None
        position = await service.get_position(USER_ID, 3, "es")
        assert position.current_word_index == 0
        assert position.last_accessed_at is None

    @pytest.mark.asyncio
    async def test_save_position(self, service, progress):
        await service.save_position(USER_ID, 3, "es", 12, 40)
        progress.save_position.assert_awaited_once_with(USER_ID, 3, "es", 12, 40)
