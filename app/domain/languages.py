"""
Language and Topic Mapping

Resolves the many spellings clients use for a language (display names,
lower-case aliases, BCP-47 locales) to the two-letter codes the audio
library and translation table are keyed by, and maps topic titles to
their audio folder names.
"""

import re
from typing import Optional


LANGUAGE_NAMES: dict[str, str] = {
    "af": "Afrikaans", "am": "Amharic", "ar": "Arabic", "az": "Azerbaijani",
    "be": "Belarusian", "bg": "Bulgarian", "bn": "Bengali", "br": "Breton",
    "bs": "Bosnian", "ca": "Catalan", "co": "Corsican", "cs": "Czech",
    "cy": "Welsh", "da": "Danish", "de": "German", "el": "Greek",
    "en": "English",
    "eo": "Esperanto", "es": "Spanish", "et": "Estonian", "eu": "Basque",
    "fa": "Persian", "fi": "Finnish", "fo": "Faroese", "fr": "French",
    "ga": "Irish", "gd": "Scottish Gaelic", "gu": "Gujarati", "ha": "Hausa",
    "he": "Hebrew", "hi": "Hindi", "hr": "Croatian", "hu": "Hungarian",
    "id": "Indonesian", "ig": "Igbo", "is": "Icelandic", "it": "Italian",
    "ja": "Japanese", "jv": "Javanese", "ka": "Georgian", "kk": "Kazakh",
    "km": "Khmer", "kn": "Kannada", "ko": "Korean", "ky": "Kyrgyz",
    "la": "Latin", "lb": "Luxembourgish", "lo": "Lao", "lt": "Lithuanian",
    "lv": "Latvian", "mg": "Malagasy", "mk": "Macedonian", "ml": "Malayalam",
    "mn": "Mongolian", "mr": "Marathi", "ms": "Malay", "mt": "Maltese",
    "my": "Myanmar", "ne": "Nepali", "nl": "Dutch", "no": "Norwegian",
    "or": "Odia", "pa": "Punjabi", "pl": "Polish", "ps": "Pashto",
    "pt": "Portuguese", "ro": "Romanian", "ru": "Russian", "rw": "Kinyarwanda",
    "sa": "Sanskrit", "si": "Sinhala", "sk": "Slovak", "sl": "Slovenian",
    "sn": "Shona", "so": "Somali", "sq": "Albanian", "sr": "Serbian",
    "sv": "Swedish", "sw": "Swahili", "ta": "Tamil", "te": "Telugu",
    "tg": "Tajik", "th": "Thai", "tk": "Turkmen", "tl": "Filipino",
    "tr": "Turkish", "uk": "Ukrainian", "ur": "Urdu", "uz": "Uzbek",
    "vi": "Vietnamese", "xh": "Xhosa", "yo": "Yoruba", "zh": "Chinese",
    "zu": "Zulu",
    # Planned additions, not yet in the translation table
    "ab": "Abkhaz", "ay": "Aymara", "ba": "Bashkir", "bm": "Bambara",
    "dv": "Divehi", "ee": "Ewe", "fj": "Fijian", "fy": "Frisian",
    "gl": "Galician", "gn": "Guarani", "ht": "Haitian Creole", "ia": "Interlingua",
    "ie": "Interlingue", "ik": "Inupiaq", "io": "Ido", "ku": "Kurdish",
    "mi": "Maori", "na": "Nauru", "ny": "Chichewa",
}

PLANNED_LANGUAGES = frozenset({
    "ab", "ay", "ba", "bm", "dv", "ee", "fj", "fy", "gl", "gn",
    "ht", "ia", "ie", "ik", "io", "ku", "mi", "na", "ny",
})

_NAME_TO_CODE: dict[str, str] = {name: code for code, name in LANGUAGE_NAMES.items()}

_ALIASES: dict[str, str] = {
    **{name.lower(): code for name, code in _NAME_TO_CODE.items()},
    "gaelic": "ga",
    "irish gaelic": "ga",
    "farsi": "fa",
    "mandarin": "zh",
    "burmese": "my",
    "tagalog": "tl",
}

_LOCALES: dict[str, str] = {
    "el-GR": "el", "en-US": "en", "en-GB": "en", "es-ES": "es",
    "fr-FR": "fr", "de-DE": "de", "it-IT": "it", "pt-PT": "pt",
    "pt-BR": "pt", "ru-RU": "ru", "ja-JP": "ja", "ko-KR": "ko",
    "zh-CN": "zh", "ar-SA": "ar", "nb-NO": "no", "nn-NO": "no",
}

TOPIC_FOLDERS: dict[str, str] = {
    "Greetings": "greetings",
    "Numbers": "numbers",
    "Time & Dates": "time_dates",
    "Directions & Transportation": "directions_transportation",
    "Shopping & Money": "shopping_money",
    "Food, Drinks & Restaurants": "food_drinks_restaurants",
    "Emergency & Safety": "emergency_safety",
    "Health & Body Parts": "health_body_parts",
    "Home & Household Items": "home_household_items",
    "Clothing & Personal Style": "clothing_personal_style",
    "Weather & Seasons": "weather_seasons",
    "Family & Relationships": "family_relationships",
    "Emotions & Feelings": "emotions_feelings",
    "Personality & Character": "personality_character",
    "Hobbies & Leisure Activities": "hobbies_leisure_activities",
    "Sports & Fitness": "sports_fitness",
    "Places Around Town": "places_around_town",
    "Travel & Tourism": "travel_tourism",
    "Colors & Shapes": "colors_shapes",
    "Nature": "nature",
    "Actions": "actions",
    "Adjectives": "adjectives",
    "Arts & Entertainment": "arts_entertainment",
    "Technology & Gadgets": "technology_gadgets",
    "Work & Professions": "work_professions",
    "Education & School Life": "education_school_life",
    "Communication & Media": "communication_media",
    "Environment & Sustainability": "environment_sustainability",
    "Business & Economics": "business_economics",
    "Common Collocations": "common_collocations",
    "Slang & Modern Expressions": "slang_modern_expressions",
    "Science & Technology": "science_technology",
    "Mathematics & Geometry": "mathematics_geometry",
    "History & Culture": "history_culture",
    "Politics & Law": "politics_law",
    "Religion & Philosophy": "religion_philosophy",
    "Mythology & Fantasy": "mythology_fantasy",
    "Celebrations & Holidays": "celebrations_holidays",
    "Advanced Communication & Formal Language": "advanced_communication_formal_language",
    "Cultural Integration & Global Perspectives": "cultural_integration_global_perspectives",
}

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def slugify(value: str) -> str:
    """Lower-case and replace every non [a-z0-9] character with '_'."""
    return _NON_ALNUM.sub("_", value.lower())


def get_language_code(language: str) -> str:
    """
    Resolve a language name, alias or locale to its audio library code.

    Unknown values fall back to the primary subtag, lower-cased, so
    ``"pt-BR"`` and ``"PT"`` both become ``"pt"``.
    """
    language = language.strip()
    code = (
        _NAME_TO_CODE.get(language)
        or _ALIASES.get(language.lower())
        or _LOCALES.get(language)
    )
    if code:
        return code
    return language.split("-")[0].lower()


def get_translation_language_code(language: str) -> str:
    """Strict mapping used for vocabulary_translations; unknown names are English."""
    language = language.strip()
    if language in LANGUAGE_NAMES:
        return language
    return _NAME_TO_CODE.get(language) or _ALIASES.get(language.lower()) or "en"


def get_topic_folder_name(topic_name: str) -> str:
    return TOPIC_FOLDERS.get(topic_name) or slugify(topic_name)


def get_language_name(code: str) -> Optional[str]:
    return LANGUAGE_NAMES.get(code)


def list_supported_languages() -> list[dict]:
    """Languages available for study, sorted by display name."""
    return sorted(
        (
            {"code": code, "name": name, "planned": code in PLANNED_LANGUAGES}
            for code, name in LANGUAGE_NAMES.items()
        ),
        key=lambda item: item["name"],
    )
