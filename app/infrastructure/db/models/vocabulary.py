"""
Vocabulary SQLModels

English headwords grouped by topic, plus one translation row per
(word, language). Topic ids match the entries of topics.json.
"""

from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class Vocabulary(SQLModel, table=True):
    """
    Database table for vocabulary words.

    Table: vocabulary
    """

    __tablename__ = "vocabulary"

    id: Optional[int] = Field(default=None, primary_key=True)
    topic_id: int = Field(..., index=True)
    word_en: str = Field(..., max_length=255)
    context: Optional[str] = Field(default=None)
    part_of_speech: Optional[str] = Field(default=None, max_length=50)
    difficulty_level: Optional[str] = Field(default=None, max_length=20)
    example_sentence: Optional[str] = Field(default=None)
    learning_order: Optional[int] = Field(default=None, index=True)


class VocabularyTranslation(SQLModel, table=True):
    """Translation of a vocabulary word into one language."""

    __tablename__ = "vocabulary_translations"
    __table_args__ = (
        UniqueConstraint("vocabulary_id", "language_code", name="uq_vocabulary_translation"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    vocabulary_id: int = Field(..., foreign_key="vocabulary.id", index=True)
    language_code: str = Field(..., max_length=10, index=True)
    translated_word: str = Field(..., max_length=255)
