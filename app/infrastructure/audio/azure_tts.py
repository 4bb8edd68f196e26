"""
Azure Speech TTS Service

On-demand pronunciation for languages the Alnilam library does not
cover. Uses the Azure Speech REST endpoint and returns 24 kHz mono MP3,
the closest Azure format to the Alnilam recordings.

API Docs: https://learn.microsoft.com/azure/ai-services/speech-service/rest-text-to-speech
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional
from xml.sax.saxutils import escape, quoteattr

import httpx

from app.config.settings import settings
from app.infrastructure.exceptions import (
    ExternalServiceError,
    ServiceUnavailableError,
    ValidationError,
)


logger = logging.getLogger(__name__)

PROVIDER = "azure-speech"
OUTPUT_FORMAT = "audio-24khz-96kbitrate-mono-mp3"


@dataclass(frozen=True)
class AzureVoice:
    voice_name: str
    display_name: str
    language_code: str
    locale: str
    gender: str


# language code -> (locale, female voice, male voice). English is served by Alnilam.
_VOICE_TABLE: Dict[str, tuple] = {
    "af": ("af-ZA", "Adri", "Willem"),
    "am": ("am-ET", "Mekdes", "Ameha"),
    "az": ("az-AZ", "Banu", "Babak"),
    "be": ("be-BY", "Daria", "Anton"),
    "bg": ("bg-BG", "Kalina", "Borislav"),
    "bs": ("bs-BA", "Vesna", "Goran"),
    "ca": ("ca-ES", "Alba", "Enric"),
    "cs": ("cs-CZ", "Vlasta", "Antonin"),
    "cy": ("cy-GB", "Nia", "Aled"),
    "da": ("da-DK", "Christel", "Jeppe"),
    "el": ("el-GR", "Athina", "Nestor"),
    "et": ("et-EE", "Anu", "Kert"),
    "eu": ("eu-ES", "Ainhoa", "Ander"),
    "fa": ("fa-IR", "Dilara", "Farid"),
    "fi": ("fi-FI", "Noora", "Harri"),
    "ga": ("ga-IE", "Orla", "Colm"),
    "gu": ("gu-IN", "Dhwani", "Niranjan"),
    "he": ("he-IL", "Hila", "Avri"),
    "hr": ("hr-HR", "Gabrijela", "Srecko"),
    "hu": ("hu-HU", "Noemi", "Tamas"),
    "is": ("is-IS", "Gudrun", "Gunnar"),
    "ka": ("ka-GE", "Eka", "Giorgi"),
    "kk": ("kk-KZ", "Aigul", "Daulet"),
    "km": ("km-KH", "Sreymom", "Pisach"),
    "kn": ("kn-IN", "Sapna", "Gagan"),
    "ky": ("ky-KG", "Aisulu", "Azamat"),
    "lo": ("lo-LA", "Keomany", "Chanthavong"),
    "lt": ("lt-LT", "Ona", "Leonas"),
    "lv": ("lv-LV", "Everita", "Nils"),
    "mk": ("mk-MK", "Marija", "Aleksandar"),
    "ml": ("ml-IN", "Sobhana", "Midhun"),
    "mn": ("mn-MN", "Yesui", "Batbayar"),
    "ms": ("ms-MY", "Yasmin", "Osman"),
    "mt": ("mt-MT", "Grace", "Joseph"),
    "my": ("my-MM", "Nilar", "Thiha"),
    "ne": ("ne-NP", "Hemkala", "Sagar"),
    "no": ("nb-NO", "Pernille", "Finn"),
    "ps": ("ps-AF", "Latifa", "GulNawaz"),
    "si": ("si-LK", "Thilini", "Sameera"),
    "sk": ("sk-SK", "Viktoria", "Lukas"),
    "sl": ("sl-SI", "Petra", "Rok"),
    "sq": ("sq-AL", "Anila", "Ilir"),
    "sr": ("sr-RS", "Sophie", "Nicholas"),
    "sv": ("sv-SE", "Sofie", "Mattias"),
    "sw": ("sw-TZ", "Rehema", "Daudi"),
    "tg": ("tg-TJ", "Hulkar", "Abdurahmon"),
    "tk": ("tk-TM", "Sindor", "Abidurahman"),
    "ur": ("ur-PK", "Uzma", "Asad"),
    "uz": ("uz-UZ", "Madina", "Sardor"),
    "zh": ("zh-CN", "Xiaoxiao", "Yunxi"),
}


def _build_voices() -> Dict[str, List[AzureVoice]]:
    voices = {}
    for code, (locale, female, male) in _VOICE_TABLE.items():
        voices[code] = [
            AzureVoice(f"{locale}-{female}Neural", f"{female} (Female)", code, locale, "Female"),
            AzureVoice(f"{locale}-{male}Neural", f"{male} (Male)", code, locale, "Male"),
        ]
    return voices


AZURE_VOICES: Dict[str, List[AzureVoice]] = _build_voices()


def get_voices_for_language(language_code: str) -> List[AzureVoice]:
    return AZURE_VOICES.get(language_code, [])


def select_voice(language_code: str, gender: Optional[str] = None) -> Optional[AzureVoice]:
    """Voice of the requested gender (Female by default), else the first voice."""
    voices = get_voices_for_language(language_code)
    if not voices:
        return None
    preferred = (gender or "Female").capitalize()
    return next((v for v in voices if v.gender == preferred), voices[0])


def build_ssml(text: str, voice: AzureVoice, speed: float = 1.0, pitch: str = "medium") -> str:
    return (
        f'<speak version="1.0" xmlns="http://www.w3.org/2001/10/synthesis" '
        f'xmlns:mstts="https://www.w3.org/2001/mstts" xml:lang="{voice.locale}">'
        f'<voice name="{voice.voice_name}">'
        f'<mstts:express-as style="calm" styledegree="0.8">'
        f'<prosody rate={quoteattr(str(speed))} pitch={quoteattr(pitch)} volume="default">'
        f"{escape(text)}"
        f"</prosody></mstts:express-as></voice></speak>"
    )


class AzureTTSService:
    """Text-to-speech over the Azure Speech REST API."""

    def __init__(
        self,
        speech_key: Optional[str] = None,
        region: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.speech_key = speech_key if speech_key is not None else settings.azure_speech_key
        self.region = region or settings.azure_region
        self.timeout = timeout or settings.audio_fetch_timeout

    @property
    def endpoint(self) -> str:
        return f"https://{self.region}.tts.speech.microsoft.com/cognitiveservices/v1"

    def is_available(self) -> bool:
        return bool(self.speech_key and self.region)

    def get_status(self) -> dict:
        if not self.is_available():
            return {
                "available": False,
                "language_count": 0,
                "error": "Azure credentials not configured",
            }
        return {"available": True, "language_count": len(AZURE_VOICES)}

    async def synthesize(
        self,
        text: str,
        language_code: str,
        gender: Optional[str] = None,
        speed: float = 1.0,
        pitch: str = "medium",
    ) -> bytes:
        """
        Generate MP3 audio for ``text``.

        Raises:
            ValidationError: no Azure voice for the language
            ServiceUnavailableError: credentials not configured
            ExternalServiceError: Azure rejected or failed the request
        """
        voice = select_voice(language_code, gender)
        if voice is None:
            raise ValidationError(
                f"Language not supported by Azure TTS: {language_code}",
                details={"languageCode": language_code},
            )

        if not self.is_available():
            raise ServiceUnavailableError("Azure credentials not configured", provider=PROVIDER)

        ssml = build_ssml(text, voice, speed=speed, pitch=pitch)
        logger.info(f"[AZURE] Synthesizing {len(text)} chars with {voice.voice_name}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.endpoint,
                    content=ssml.encode("utf-8"),
                    headers={
                        "Ocp-Apim-Subscription-Key": self.speech_key,
                        "Content-Type": "application/ssml+xml",
                        "X-Microsoft-OutputFormat": OUTPUT_FORMAT,
                        "User-Agent": "vocabworld-api",
                    },
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"[AZURE] HTTP {e.response.status_code} for {language_code}")
            raise ExternalServiceError(
                "Azure TTS request failed",
                provider=PROVIDER,
                status_code=e.response.status_code,
                original_error=e,
            )
        except httpx.HTTPError as e:
            logger.error(f"[AZURE] Request error for {language_code}: {e}")
            raise ExternalServiceError("Azure TTS request failed", provider=PROVIDER, original_error=e)

        if not response.content:
            raise ExternalServiceError("Azure TTS returned no audio", provider=PROVIDER)

        return response.content


def get_azure_tts_service() -> AzureTTSService:
    return AzureTTSService()
