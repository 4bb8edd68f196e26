"""
Progress Routes

Word tracking, stats, login streak, topic completion and reading
position for the signed-in user.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.domain.progress import (
    CompletedTopicsResponse,
    ProgressStats,
    TopicPosition,
    TopicPositionUpdate,
    TopicProgress,
    TrackWordRequest,
    TrackWordResult,
)
from app.infrastructure.services.progress_service import ProgressService
from app.api.dependencies import ProgressRepoDep, VocabularyRepoDep, get_current_user_id


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/progress", tags=["progress"])


def get_progress_service(progress: ProgressRepoDep, vocabulary: VocabularyRepoDep) -> ProgressService:
    return ProgressService(progress, vocabulary)


LanguageParam = Annotated[str, Query(alias="targetLanguageCode", min_length=2, max_length=10)]


@router.post("/track", response_model=TrackWordResult, response_model_exclude_none=True)
async def track_word(
    request: TrackWordRequest,
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    """Record a played word; the response carries the refreshed completed topics."""
    result = await service.track_word_played(
        user_id, request.vocabulary_id, request.target_language_code
    )
    if result.success:
        result.completed_topic_ids = await service.get_completed_topic_ids(
            user_id, request.target_language_code
        )
    return result


@router.get("/stats", response_model=ProgressStats)
async def get_stats(
    language: LanguageParam,
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    return await service.get_progress_stats(user_id, language)


@router.post("/streak")
async def update_streak(
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    streak = await service.update_login_streak(user_id)
    return {"success": True, "currentStreak": streak}


@router.get("/topics", response_model=CompletedTopicsResponse)
async def get_completed_topics(
    language: LanguageParam,
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    return CompletedTopicsResponse(
        completed_topic_ids=await service.get_completed_topic_ids(user_id, language)
    )


@router.get("/topics/all", response_model=list[TopicProgress])
async def get_all_topic_progress(
    language: LanguageParam,
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    return await service.get_all_topic_progress(user_id, language)


@router.get("/topics/{topic_id}", response_model=TopicProgress)
async def get_topic_progress(
    topic_id: int,
    language: LanguageParam,
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    return await service.get_topic_progress(user_id, topic_id, language)


@router.get("/position", response_model=TopicPosition)
async def get_position(
    topic_id: Annotated[int, Query(alias="topicId", ge=1)],
    language: LanguageParam,
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    return await service.get_position(user_id, topic_id, language)


@router.post("/position")
async def save_position(
    request: TopicPositionUpdate,
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    await service.save_position(
        user_id,
        request.topic_id,
        request.target_language_code,
        request.current_word_index,
        request.total_words,
    )
    return {"success": True}
