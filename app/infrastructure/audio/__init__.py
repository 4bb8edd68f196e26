"""
Audio Infrastructure Module

Audio providers: the local Alnilam library, the Backblaze URL index and
B2 client, Azure Speech TTS and the Umbriel greetings manifest.
"""

from app.infrastructure.audio.url_index import (
    AudioFileEntry,
    AudioUrlIndex,
    get_audio_url_index,
)
from app.infrastructure.audio.alnilam_library import AlnilamLibrary, get_alnilam_library
from app.infrastructure.audio.b2_client import B2Client, get_b2_client
from app.infrastructure.audio.azure_tts import AzureTTSService, get_azure_tts_service
from app.infrastructure.audio.umbriel import UmbrielLibrary, get_umbriel_library

__all__ = [
    "AudioFileEntry",
    "AudioUrlIndex",
    "get_audio_url_index",
    "AlnilamLibrary",
    "get_alnilam_library",
    "B2Client",
    "get_b2_client",
    "AzureTTSService",
    "get_azure_tts_service",
    "UmbrielLibrary",
    "get_umbriel_library",
]
