"""
Backblaze Audio URL Index

In-memory index over the Backblaze CSV export that maps library paths
and (word id, language) pairs to public B2 URLs.

CSV layout: a header row, then five quoted fields per row:
localPath, backblazeUrl, language, category, fileName.
"""

import asyncio
import csv
import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from app.config.settings import settings


logger = logging.getLogger(__name__)

_WORD_ID_PATTERN = re.compile(r"alnilam_(\d+)_")


@dataclass(frozen=True)
class AudioFileEntry:
    """One row of the Backblaze export."""
    local_path: str
    url: str
    language: str
    category: str
    file_name: str
    word_id: Optional[str] = None


def extract_word_id(file_name: str) -> Optional[str]:
    """Word id embedded in an Alnilam file name, e.g. alnilam_42_hello.wav -> '42'."""
    match = _WORD_ID_PATTERN.search(file_name)
    return match.group(1) if match else None


class AudioUrlIndex:
    """
    Lookup tables built once from the CSV export.

    An index built from a missing file is empty and reports
    ``available == False``; routes answer 503 in that case.
    """

    def __init__(self, entries: Optional[List[AudioFileEntry]] = None, available: bool = True):
        self.available = available
        self._by_path: Dict[str, AudioFileEntry] = {}
        self._by_word: Dict[str, AudioFileEntry] = {}

        for entry in entries or []:
            self._by_path[entry.local_path] = entry
            if entry.word_id is not None:
                # First row wins for duplicate (word, language) pairs
                self._by_word.setdefault(f"{entry.word_id}-{entry.language}", entry)

    @classmethod
    def parse(cls, text: str) -> "AudioUrlIndex":
        entries = []
        skipped = 0
        rows = csv.reader(io.StringIO(text))
        next(rows, None)  # header

        for row in rows:
            if not row or not any(field.strip() for field in row):
                continue
            if len(row) != 5:
                skipped += 1
                continue
            local_path, url, language, category, file_name = row
            entries.append(
                AudioFileEntry(
                    local_path=local_path,
                    url=url,
                    language=language,
                    category=category,
                    file_name=file_name,
                    word_id=extract_word_id(file_name),
                )
            )

        if skipped:
            logger.warning(f"[AUDIO INDEX] Skipped {skipped} malformed CSV rows")
        return cls(entries)

    @classmethod
    def from_file(cls, path: Path) -> "AudioUrlIndex":
        if not path.is_file():
            logger.warning(f"[AUDIO INDEX] CSV not found at {path}, audio mapping unavailable")
            return cls(available=False)

        index = cls.parse(path.read_text(encoding="utf-8"))
        logger.info(f"[AUDIO INDEX] Loaded {len(index)} audio URL mappings from {path}")
        return index

    def __len__(self) -> int:
        return len(self._by_path)

    def get_url_by_path(self, local_path: str) -> Optional[str]:
        entry = self._by_path.get(local_path)
        return entry.url if entry else None

    def find(self, word_id: str, language: str) -> Optional[AudioFileEntry]:
        return self._by_word.get(f"{word_id}-{language}")

    def has_audio(self, word_id: str, language: str) -> bool:
        return self.find(word_id, language) is not None

    def get_available_languages(self, word_id: str) -> List[str]:
        return sorted(
            {entry.language for entry in self._by_word.values() if entry.word_id == str(word_id)}
        )

    def get_stats(self) -> dict:
        entries = self._by_path.values()
        return {
            "totalFiles": len(self._by_path),
            "languages": sorted({entry.language for entry in entries}),
            "categories": sorted({entry.category for entry in entries}),
        }


# =============================================================================
# Process-wide memoized instance
# =============================================================================

_index: Optional[AudioUrlIndex] = None
_index_lock = asyncio.Lock()


async def get_audio_url_index() -> AudioUrlIndex:
    """Load the CSV on first use; later calls reuse the same index."""
    global _index

    if _index is not None:
        return _index

    async with _index_lock:
        if _index is None:
            path = Path(settings.audio_url_index_path)
            _index = await asyncio.to_thread(AudioUrlIndex.from_file, path)

    return _index


def reset_audio_url_index() -> None:
    """Forget the memoized index so the next call reloads the CSV."""
    global _index
    _index = None


def candidate_file_names(word_id: str, word: str) -> List[str]:
    """File names tried for a word, most specific first."""
    clean = re.sub(r"[^a-z0-9]", "_", word.lower())
    return [
        f"alnilam_{word_id}_{clean}.wav",
        f"alnilam_{word_id}_{word.lower()}.wav",
        f"alnilam_{word_id}.wav",
        f"{word_id}_{clean}.wav",
        f"{clean}.wav",
    ]
