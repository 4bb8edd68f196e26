"""
Vocabulary Service

Builds vocabulary pages for a topic in a source/target language pair and
loads the static topic catalogue.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

from app.config.settings import settings
from app.domain.languages import get_translation_language_code
from app.domain.vocabulary import VocabularyItem, VocabularyPage
from app.infrastructure.db.repositories.vocabulary_repository import VocabularyRepository
from app.infrastructure.exceptions import VocabWorldError


logger = logging.getLogger(__name__)

ENGLISH = "en"


class VocabularyService:
    """Vocabulary pages backed by the vocabulary tables."""

    def __init__(self, repo: VocabularyRepository):
        self._repo = repo

    async def get_page(
        self,
        topic_id: int,
        source_language: str,
        target_language: str,
        limit: int = 50,
        offset: int = 0,
    ) -> VocabularyPage:
        """
        One page of a topic's words.

        English is stored on the vocabulary row itself; every other
        language is fetched from vocabulary_translations in one query per
        side. A missing translation falls back to the English word.
        """
        source_code = get_translation_language_code(source_language)
        target_code = get_translation_language_code(target_language)

        if source_code == target_code:
            return VocabularyPage(vocabulary=[], total_words=0, current_batch=0, has_more=False)

        total = await self._repo.count_by_topic(topic_id)
        words = await self._repo.list_by_topic(topic_id, limit=limit, offset=offset)
        ids = [w.id for w in words]

        source_map = {} if source_code == ENGLISH else await self._repo.get_translations(ids, source_code)
        target_map = {} if target_code == ENGLISH else await self._repo.get_translations(ids, target_code)

        items = [
            VocabularyItem(
                id=w.id,
                source_word=source_map.get(w.id, w.word_en),
                target_word=target_map.get(w.id, w.word_en),
                context=w.context,
                part_of_speech=w.part_of_speech,
                difficulty_level=w.difficulty_level,
                example_sentence=w.example_sentence,
                learning_order=w.learning_order,
            )
            for w in words
        ]

        logger.info(
            f"Vocabulary page topic={topic_id} {source_code}->{target_code}: "
            f"{len(items)}/{total} from offset {offset}"
        )
        return VocabularyPage(
            vocabulary=items,
            total_words=total,
            current_batch=len(items),
            has_more=offset + len(items) < total,
            data_source="supabase",
        )


def _read_topics(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


async def load_topics(path: Optional[Path] = None) -> Any:
    """Topic catalogue from the JSON data file."""
    path = Path(path) if path is not None else Path(settings.topics_data_path)
    try:
        return await asyncio.to_thread(_read_topics, path)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load topics from {path}: {e}")
        raise VocabWorldError("Failed to load topics", details={"path": str(path)}, original_error=e)
