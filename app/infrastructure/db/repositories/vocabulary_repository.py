"""
Vocabulary Repository

Topic word lists and batched translation lookups.
"""

from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models.vocabulary import Vocabulary, VocabularyTranslation
from app.infrastructure.db.repositories.base_repository import BaseRepository


class VocabularyRepository(BaseRepository[Vocabulary]):
    """Read access to vocabulary and vocabulary_translations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Vocabulary, session)

    async def count_by_topic(self, topic_id: int) -> int:
        stmt = select(func.count()).select_from(Vocabulary).where(Vocabulary.topic_id == topic_id)
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def list_by_topic(
        self,
        topic_id: int,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Vocabulary]:
        """One page of a topic's words in learning order."""
        stmt = (
            select(Vocabulary)
            .where(Vocabulary.topic_id == topic_id)
            .order_by(Vocabulary.learning_order.asc(), Vocabulary.id.asc())
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_translations(
        self,
        vocabulary_ids: Iterable[int],
        language_code: str,
    ) -> Dict[int, str]:
        """Translations for many words in one query, keyed by vocabulary id."""
        ids = list(vocabulary_ids)
        if not ids:
            return {}

        stmt = select(
            VocabularyTranslation.vocabulary_id,
            VocabularyTranslation.translated_word,
        ).where(
            VocabularyTranslation.vocabulary_id.in_(ids),
            VocabularyTranslation.language_code == language_code,
        )
        result = await self._session.execute(stmt)
        return {row.vocabulary_id: row.translated_word for row in result.all()}

    async def get_topic_id(self, vocabulary_id: int) -> Optional[int]:
        stmt = select(Vocabulary.topic_id).where(Vocabulary.id == vocabulary_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()
