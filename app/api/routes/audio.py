"""
Audio Routes

Pronunciation audio from the local Alnilam library, the public Backblaze
bucket (via the CSV URL index) and the private bucket (authenticated B2).
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from app.domain.languages import get_language_code, get_topic_folder_name
from app.infrastructure.audio.alnilam_library import AlnilamLibrary, get_alnilam_library
from app.infrastructure.audio.b2_client import B2Client, get_b2_client
from app.infrastructure.audio.url_index import (
    AudioUrlIndex,
    candidate_file_names,
    get_audio_url_index,
)
from app.infrastructure.exceptions import ExternalServiceError, ServiceUnavailableError


logger = logging.getLogger(__name__)

router = APIRouter(tags=["audio"])

ONE_YEAR = "public, max-age=31536000"


def _audio_headers(file_name: str, size: int, **extra: str) -> dict:
    return {
        "Content-Length": str(size),
        "Cache-Control": ONE_YEAR,
        "Content-Disposition": f'inline; filename="{file_name}"',
        "Access-Control-Allow-Origin": "*",
        **extra,
    }


def _error(status_code: int, error: str, **fields) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, **fields})


# =============================================================================
# URL resolution
# =============================================================================

@router.get("/audio")
async def resolve_audio_url(
    word_id: Optional[str] = Query(None, alias="wordId"),
    language: Optional[str] = Query(None),
    topic_name: Optional[str] = Query(None, alias="topicName"),
    word: Optional[str] = Query(None),
    index: AudioUrlIndex = Depends(get_audio_url_index),
):
    """
    Public Backblaze URL for a word.

    File name patterns are tried in order under
    ``{language}/{topicFolder}/``; the first one in the index wins.
    """
    if not word_id or not language or not topic_name or not word:
        return _error(400, "Missing required parameters: wordId, language, topicName, word")

    language_code = get_language_code(language)
    topic_folder = get_topic_folder_name(topic_name)
    patterns = candidate_file_names(word_id, word)

    for file_name in patterns:
        audio_url = index.get_url_by_path(f"{language_code}/{topic_folder}/{file_name}")
        if audio_url:
            return {
                "audioUrl": audio_url,
                "wordId": word_id,
                "language": language_code,
                "topicName": topic_name,
                "word": word,
                "fileName": file_name,
                "exists": True,
                "source": "backblaze",
            }

    logger.info(f"[AUDIO] No Backblaze mapping for wordId={word_id} in {language_code}/{topic_folder}")
    return _error(
        404,
        "Audio file not found",
        wordId=word_id,
        language=language_code,
        topicName=topic_name,
        word=word,
        searchedPatterns=patterns,
        exists=False,
    )


@router.get("/audio/stats")
async def audio_stats(index: AudioUrlIndex = Depends(get_audio_url_index)):
    return {"available": index.available, **index.get_stats()}


@router.get("/audio/languages/{word_id}")
async def audio_languages(word_id: str, index: AudioUrlIndex = Depends(get_audio_url_index)):
    return {"wordId": word_id, "languages": index.get_available_languages(word_id)}


# =============================================================================
# Local Alnilam library
# =============================================================================

@router.get("/alnilam-audio")
async def alnilam_audio(
    word_id: Optional[str] = Query(None, alias="wordId"),
    language_code: Optional[str] = Query(None, alias="languageCode"),
    topic_name: Optional[str] = Query(None, alias="topicName"),
    library: AlnilamLibrary = Depends(get_alnilam_library),
):
    if not word_id or not language_code:
        return _error(400, "Missing required parameters: wordId, languageCode")

    language_code = get_language_code(language_code)

    if await asyncio.to_thread(library.language_dir, language_code) is None:
        return _error(404, "Language not supported", languageCode=language_code)

    topic_folder = get_topic_folder_name(topic_name) if topic_name else None
    path = await asyncio.to_thread(library.find, language_code, word_id, topic_folder)
    if path is None:
        return _error(404, "Audio file not found", wordId=word_id, languageCode=language_code)

    content = await asyncio.to_thread(path.read_bytes)
    return Response(
        content=content,
        media_type="audio/wav",
        headers=_audio_headers(path.name, len(content)),
    )


# =============================================================================
# Backblaze B2
# =============================================================================

@router.get("/universal-audio-cloud")
async def universal_audio_cloud(
    word_id: Optional[str] = Query(None, alias="wordId"),
    language_code: Optional[str] = Query(None, alias="languageCode"),
    index: AudioUrlIndex = Depends(get_audio_url_index),
    b2: B2Client = Depends(get_b2_client),
):
    """Stream a word from the public bucket."""
    if not word_id or not language_code:
        return _error(400, "Missing required parameters: wordId, languageCode")

    language_code = get_language_code(language_code)

    if not index.available:
        return _error(503, "Audio mapping not available")

    entry = index.find(word_id, language_code)
    if entry is None:
        return _error(404, "Audio file not found", wordId=word_id, languageCode=language_code)

    try:
        content = await b2.download_public(entry.url)
    except ExternalServiceError:
        return _error(502, "Failed to fetch audio from B2", wordId=word_id, languageCode=language_code)

    return Response(
        content=content,
        media_type="audio/wav",
        headers=_audio_headers(
            entry.file_name,
            len(content),
            **{"X-Audio-Source": "backblaze-b2", "X-Audio-Cache": "cloud-storage"},
        ),
    )


@router.get("/universal-audio")
async def universal_audio(
    word_id: Optional[str] = Query(None, alias="wordId"),
    language_code: Optional[str] = Query(None, alias="languageCode"),
    index: AudioUrlIndex = Depends(get_audio_url_index),
    b2: B2Client = Depends(get_b2_client),
):
    """Stream a word from the private bucket with a prefix-scoped download token."""
    if not word_id or not language_code:
        return _error(400, "Missing required parameters: wordId, languageCode")

    language_code = get_language_code(language_code)

    if not b2.configured:
        return _error(503, "B2 credentials not configured")

    try:
        auth = await b2.authorize_account()
        token = await b2.get_download_authorization(auth, f"{language_code}/")
    except ServiceUnavailableError as e:
        return _error(503, e.message)

    if not index.available:
        return _error(503, "Audio mapping not available")

    entry = index.find(word_id, language_code)
    if entry is None:
        return _error(404, "Audio file not found", wordId=word_id, languageCode=language_code)

    try:
        content = await b2.download_private(auth, token, entry.local_path)
    except ExternalServiceError:
        return _error(502, "Failed to fetch audio from B2", wordId=word_id, languageCode=language_code)

    return Response(
        content=content,
        media_type="audio/wav",
        headers=_audio_headers(
            entry.file_name,
            len(content),
            **{"X-Audio-Source": "b2-authenticated", "X-Audio-Auth": "private-bucket"},
        ),
    )
