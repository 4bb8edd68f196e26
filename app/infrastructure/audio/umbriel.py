"""
Umbriel Greetings Audio

Pre-generated English greetings recordings and the manifest that lists
them. Files live under {UMBRIEL_AUDIO_PATH}/en and the manifest at
{UMBRIEL_AUDIO_PATH}/greetings-manifest.json.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Optional

from app.config.settings import settings
from app.infrastructure.exceptions import NotFoundError, ValidationError


logger = logging.getLogger(__name__)

MANIFEST_NAME = "greetings-manifest.json"

_AUDIO_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*\.(wav|mp3)$")

MEDIA_TYPES = {".wav": "audio/wav", ".mp3": "audio/mpeg"}


class UmbrielLibrary:
    """Serves the greetings manifest and its audio files."""

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root is not None else Path(settings.umbriel_audio_path)

    def load_manifest(self) -> Any:
        path = self.root / MANIFEST_NAME
        if not path.is_file():
            raise NotFoundError("Umbriel manifest not found", operation="read", table=MANIFEST_NAME)
        return json.loads(path.read_text(encoding="utf-8"))

    def resolve_audio(self, filename: str) -> Path:
        """
        Path of a greetings recording.

        Only bare ``.wav``/``.mp3`` names are accepted, so a request can
        never leave the ``en`` folder.
        """
        if not _AUDIO_NAME.match(filename) or ".." in filename:
            raise ValidationError("Invalid audio filename", details={"filename": filename})

        path = self.root / "en" / filename
        if not path.is_file():
            logger.info(f"[UMBRIEL] Missing audio file {filename}")
            raise NotFoundError("Audio file not found", operation="read", table=filename)
        return path


def media_type_for(path: Path) -> str:
    return MEDIA_TYPES.get(path.suffix.lower(), "application/octet-stream")


def get_umbriel_library() -> UmbrielLibrary:
    return UmbrielLibrary()
