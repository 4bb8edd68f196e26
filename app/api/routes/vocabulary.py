"""
Vocabulary Routes

Topic word lists, template example sentences, the topic catalogue and
the list of study languages.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.domain.languages import list_supported_languages
from app.domain.vocabulary import (
    ExampleSentence,
    ExampleSentenceRequest,
    VocabularyPage,
    generate_example_sentence,
)
from app.infrastructure.exceptions import VocabWorldError
from app.infrastructure.services.vocabulary_service import VocabularyService, load_topics
from app.api.dependencies import VocabularyRepoDep


logger = logging.getLogger(__name__)

router = APIRouter(tags=["vocabulary"])


def get_vocabulary_service(repo: VocabularyRepoDep) -> VocabularyService:
    return VocabularyService(repo)


@router.get("/vocabulary", response_model=VocabularyPage, response_model_exclude_none=True)
async def get_vocabulary(
    topic_id: Optional[int] = Query(None, alias="topicId"),
    source_language: Optional[str] = Query(None, alias="sourceLanguage"),
    target_language: Optional[str] = Query(None, alias="targetLanguage"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: VocabularyService = Depends(get_vocabulary_service),
):
    if topic_id is None or not source_language or not target_language:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required parameters: topicId, sourceLanguage, targetLanguage",
        )

    try:
        return await service.get_page(topic_id, source_language, target_language, limit, offset)
    except Exception as e:
        logger.error(f"Failed to load vocabulary for topic {topic_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch vocabulary")


@router.post("/vocabulary/example-sentence", response_model=ExampleSentence)
async def example_sentence(request: ExampleSentenceRequest):
    return generate_example_sentence(request.word, request.translation, request.target_language)


@router.get("/topics")
async def get_topics():
    try:
        return await load_topics()
    except VocabWorldError:
        raise HTTPException(status_code=500, detail="Failed to load topics")


@router.get("/languages")
async def get_languages():
    return {"languages": list_supported_languages()}
