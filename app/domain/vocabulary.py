"""
Vocabulary Domain Models

DTOs for vocabulary pages and the template-based example sentence
generator. Templates keep example sentences free and offline: no AI call.
"""

import random
from typing import Optional
from pydantic import Field

from app.domain.models import CamelModel


class VocabularyItem(CamelModel):
    """One word card as rendered by the learning screen."""
    id: int
    source_word: str
    target_word: str
    confidence_score: float = 0.95
    context: Optional[str] = None
    part_of_speech: Optional[str] = None
    difficulty_level: Optional[str] = None
    example_sentence: Optional[str] = None
    learning_order: Optional[int] = None


class VocabularyPage(CamelModel):
    vocabulary: list[VocabularyItem]
    total_words: int
    current_batch: int
    has_more: bool
    data_source: Optional[str] = None


class ExampleSentenceRequest(CamelModel):
    word: str = Field(..., min_length=1)
    translation: str = ""
    target_language: str = ""
    native_language: Optional[str] = None


class ExampleSentence(CamelModel):
    sentence: str
    translation: str


# Each entry is (target-language pattern, English rendering)
EXAMPLE_TEMPLATES: dict[str, list[tuple[str, str]]] = {
    "German": [
        ("Ich brauche {word}.", "I need {translation}."),
        ("Wo ist {word}?", "Where is {translation}?"),
        ("Das ist {word}.", "This is {translation}."),
        ("Ich habe {word}.", "I have {translation}."),
        ("Ich sehe {word}.", "I see {translation}."),
    ],
    "French": [
        ("J'ai {word}.", "I have {translation}."),
        ("C'est {word}.", "This is {translation}."),
        ("Où est {word}?", "Where is {translation}?"),
        ("Je vois {word}.", "I see {translation}."),
        ("Voici {word}.", "Here is {translation}."),
    ],
    "Spanish": [
        ("Necesito {word}.", "I need {translation}."),
        ("¿Dónde está {word}?", "Where is {translation}?"),
        ("Esto es {word}.", "This is {translation}."),
        ("Tengo {word}.", "I have {translation}."),
        ("Veo {word}.", "I see {translation}."),
    ],
    "Italian": [
        ("Ho {word}.", "I have {translation}."),
        ("Questo è {word}.", "This is {translation}."),
        ("Dov'è {word}?", "Where is {translation}?"),
        ("Vedo {word}.", "I see {translation}."),
        ("Ecco {word}.", "Here is {translation}."),
    ],
    "Portuguese": [
        ("Eu tenho {word}.", "I have {translation}."),
        ("Isto é {word}.", "This is {translation}."),
        ("Onde está {word}?", "Where is {translation}?"),
        ("Eu vejo {word}.", "I see {translation}."),
        ("Preciso de {word}.", "I need {translation}."),
    ],
    "Dutch": [
        ("Ik heb {word}.", "I have {translation}."),
        ("Dit is {word}.", "This is {translation}."),
        ("Waar is {word}?", "Where is {translation}?"),
        ("Ik zie {word}.", "I see {translation}."),
    ],
    "Russian": [
        ("У меня есть {word}.", "I have {translation}."),
        ("Это {word}.", "This is {translation}."),
        ("Где {word}?", "Where is {translation}?"),
        ("Я вижу {word}.", "I see {translation}."),
    ],
    "Japanese": [
        ("{word}があります。", "There is {translation}."),
        ("これは{word}です。", "This is {translation}."),
        ("{word}はどこですか？", "Where is {translation}?"),
        ("{word}を見ます。", "I see {translation}."),
    ],
    "Chinese": [
        ("我有{word}。", "I have {translation}."),
        ("这是{word}。", "This is {translation}."),
        ("{word}在哪里？", "Where is {translation}?"),
        ("我看到{word}。", "I see {translation}."),
    ],
    "Korean": [
        ("{word}가 있어요.", "There is {translation}."),
        ("이것은 {word}예요.", "This is {translation}."),
        ("{word}가 어디 있어요?", "Where is {translation}?"),
    ],
    "Arabic": [
        ("عندي {word}.", "I have {translation}."),
        ("هذا {word}.", "This is {translation}."),
        ("أين {word}؟", "Where is {translation}?"),
    ],
    "Turkish": [
        ("{word} var.", "There is {translation}."),
        ("Bu {word}.", "This is {translation}."),
        ("{word} nerede?", "Where is {translation}?"),
    ],
    "Polish": [
        ("Mam {word}.", "I have {translation}."),
        ("To jest {word}.", "This is {translation}."),
        ("Gdzie jest {word}?", "Where is {translation}?"),
    ],
    "Swedish": [
        ("Jag har {word}.", "I have {translation}."),
        ("Det här är {word}.", "This is {translation}."),
        ("Var är {word}?", "Where is {translation}?"),
    ],
    "Norwegian": [
        ("Jeg har {word}.", "I have {translation}."),
        ("Dette er {word}.", "This is {translation}."),
        ("Hvor er {word}?", "Where is {translation}?"),
    ],
    "Danish": [
        ("Jeg har {word}.", "I have {translation}."),
        ("Dette er {word}.", "This is {translation}."),
        ("Hvor er {word}?", "Where is {translation}?"),
    ],
    "Finnish": [
        ("Minulla on {word}.", "I have {translation}."),
        ("Tämä on {word}.", "This is {translation}."),
        ("Missä on {word}?", "Where is {translation}?"),
    ],
    "Greek": [
        ("Έχω {word}.", "I have {translation}."),
        ("Αυτό είναι {word}.", "This is {translation}."),
        ("Πού είναι {word};", "Where is {translation}?"),
    ],
    "Czech": [
        ("Mám {word}.", "I have {translation}."),
        ("To je {word}.", "This is {translation}."),
        ("Kde je {word}?", "Where is {translation}?"),
    ],
    "Hungarian": [
        ("Van {word}.", "There is {translation}."),
        ("Ez {word}.", "This is {translation}."),
        ("Hol van {word}?", "Where is {translation}?"),
    ],
    "Thai": [
        ("ฉันมี{word}", "I have {translation}."),
        ("นี่คือ{word}", "This is {translation}."),
        ("{word}อยู่ที่ไหน", "Where is {translation}?"),
    ],
    "Vietnamese": [
        ("Tôi có {word}.", "I have {translation}."),
        ("Đây là {word}.", "This is {translation}."),
        ("{word} ở đâu?", "Where is {translation}?"),
    ],
    "Hindi": [
        ("मेरे पास {word} है।", "I have {translation}."),
        ("यह {word} है।", "This is {translation}."),
        ("{word} कहाँ है?", "Where is {translation}?"),
    ],
}


def generate_example_sentence(
    word: str,
    translation: str,
    target_language: str,
    rng: Optional[random.Random] = None,
) -> ExampleSentence:
    """
    Build a short example sentence around a word.

    Languages without templates get the bare word back, which the client
    renders as a flashcard instead of a sentence.
    """
    templates = EXAMPLE_TEMPLATES.get(target_language)
    if not templates:
        return ExampleSentence(sentence=word, translation=translation)

    pattern, native = (rng or random).choice(templates)
    return ExampleSentence(
        sentence=pattern.replace("{word}", word),
        translation=native.replace("{translation}", translation),
    )
