"""
Text-to-Speech Routes

Azure Speech synthesis for languages outside the Alnilam library, and
the Umbriel greetings recordings.
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from pydantic import Field

from app.domain.models import CamelModel
from app.infrastructure.audio.azure_tts import AzureTTSService, get_azure_tts_service
from app.infrastructure.audio.umbriel import UmbrielLibrary, get_umbriel_library, media_type_for
from app.infrastructure.exceptions import (
    ExternalServiceError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)


logger = logging.getLogger(__name__)

router = APIRouter(tags=["tts"])


class SynthesisRequest(CamelModel):
    text: str = Field(..., min_length=1, max_length=1000)
    language_code: str = Field(..., min_length=2, max_length=10)
    gender: Optional[str] = None
    speed: float = Field(default=1.0, gt=0.0, le=3.0)
    pitch: str = "medium"


# =============================================================================
# Azure
# =============================================================================

@router.get("/tts/azure/status")
async def azure_status(service: AzureTTSService = Depends(get_azure_tts_service)):
    return service.get_status()


@router.post("/tts/azure")
async def azure_synthesize(
    request: SynthesisRequest,
    service: AzureTTSService = Depends(get_azure_tts_service),
):
    """MP3 audio for a word or phrase."""
    try:
        audio = await service.synthesize(
            request.text,
            request.language_code,
            gender=request.gender,
            speed=request.speed,
            pitch=request.pitch,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except ServiceUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
    except ExternalServiceError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

    return Response(
        content=audio,
        media_type="audio/mpeg",
        headers={"Content-Length": str(len(audio)), "Cache-Control": "public, max-age=86400"},
    )


# =============================================================================
# Umbriel greetings
# =============================================================================

@router.get("/umbriel/manifest")
async def umbriel_manifest(library: UmbrielLibrary = Depends(get_umbriel_library)):
    try:
        return await asyncio.to_thread(library.load_manifest)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except ValueError as e:
        logger.error(f"[UMBRIEL] Manifest is not valid JSON: {e}")
        raise HTTPException(status_code=500, detail="Failed to load manifest")


@router.get("/umbriel/audio/{filename}")
async def umbriel_audio(filename: str, library: UmbrielLibrary = Depends(get_umbriel_library)):
    try:
        path = library.resolve_audio(filename)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    content = await asyncio.to_thread(path.read_bytes)
    return Response(
        content=content,
        media_type=media_type_for(path),
        headers={"Content-Length": str(len(content)), "Cache-Control": "public, max-age=31536000"},
    )
