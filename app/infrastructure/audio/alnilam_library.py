"""
Alnilam Audio Library

Locates pre-generated word recordings on local disk. Layout:
{root}/{language}/{topic_folder}/alnilam_{wordId}_{word}.wav
"""

import logging
from pathlib import Path
from typing import Optional

from app.config.settings import settings


logger = logging.getLogger(__name__)


class AlnilamLibrary:
    """Read-only view over the Alnilam folder tree."""

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root is not None else Path(settings.alnilam_library_path)

    def language_dir(self, language_code: str) -> Optional[Path]:
        """Directory for a language, or None when the library does not have it."""
        path = self.root / language_code
        if path.resolve().parent != self.root.resolve() or not path.is_dir():
            return None
        return path

    def find(
        self,
        language_code: str,
        word_id: str,
        topic_folder: Optional[str] = None,
    ) -> Optional[Path]:
        """
        First ``alnilam_{wordId}_*.wav`` in the topic folder, or in every
        topic folder when none is given.
        """
        language_dir = self.language_dir(language_code)
        if language_dir is None:
            return None

        if topic_folder:
            candidate = language_dir / topic_folder
            if candidate.resolve().parent != language_dir.resolve():
                return None
            search_dirs = [candidate] if candidate.is_dir() else []
        else:
            search_dirs = sorted(p for p in language_dir.iterdir() if p.is_dir())

        prefix = f"alnilam_{word_id}_"
        for directory in search_dirs:
            matches = sorted(
                p for p in directory.iterdir()
                if p.is_file() and p.name.startswith(prefix) and p.name.endswith(".wav")
            )
            if matches:
                logger.info(f"[ALNILAM] Found {matches[0].name} in {directory.name}")
                return matches[0]

        logger.info(f"[ALNILAM] No audio for wordId={word_id}, language={language_code}")
        return None


def get_alnilam_library() -> AlnilamLibrary:
    return AlnilamLibrary()
