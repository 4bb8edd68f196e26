"""
Integration Tests for Audio and TTS Routes

Audio sources are replaced through dependency overrides: the URL index
is parsed from a small CSV fixture, local libraries live in tmp_path and
the B2/Azure clients are mocks.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.infrastructure.audio.alnilam_library import AlnilamLibrary, get_alnilam_library
from app.infrastructure.audio.azure_tts import get_azure_tts_service
from app.infrastructure.audio.b2_client import B2Authorization, get_b2_client
from app.infrastructure.audio.umbriel import UmbrielLibrary, get_umbriel_library
from app.infrastructure.audio.url_index import AudioUrlIndex, get_audio_url_index
from app.infrastructure.exceptions import (
    ExternalServiceError,
    ServiceUnavailableError,
    ValidationError,
)


@pytest.fixture
def use_index(app, audio_index):
    async def _index():
        return audio_index

    app.dependency_overrides[get_audio_url_index] = _index
    return audio_index


@pytest.fixture
def unavailable_index(app):
    async def _index():
        return AudioUrlIndex(available=False)

    app.dependency_overrides[get_audio_url_index] = _index


@pytest.fixture
def mock_b2(app):
    b2 = MagicMock()
    b2.configured = True
    b2.authorize_account = AsyncMock(return_value=B2Authorization(
        api_url="https://api.example",
        download_url="https://f.example",
        authorization_token="account-token",
    ))
    b2.get_download_authorization = AsyncMock(return_value="dl-token")
    b2.download_public = AsyncMock(return_value=b"RIFF-public")
    b2.download_private = AsyncMock(return_value=b"RIFF-private")
    app.dependency_overrides[get_b2_client] = lambda: b2
    return b2


# =============================================================================
# URL resolution
# =============================================================================

class TestAudioUrl:

    def test_missing_parameters(self, client, use_index):
        response = client.get("/api/audio", params={"wordId": "1", "language": "Spanish"})

        assert response.status_code == 400
        assert response.json()["error"].startswith("Missing required parameters")

    def test_found(self, client, use_index):
        response = client.get(
            "/api/audio",
            params={"wordId": "2", "language": "Spanish", "topicName": "Greetings", "word": "Good Morning"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["audioUrl"] == "https://b2.example/es/greetings/alnilam_2_good_morning.wav"
        assert body["language"] == "es"
        assert body["fileName"] == "alnilam_2_good_morning.wav"
        assert body["exists"] is True
        assert body["source"] == "backblaze"

    def test_not_found_lists_patterns(self, client, use_index):
        response = client.get(
            "/api/audio",
            params={"wordId": "9", "language": "fr", "topicName": "Greetings", "word": "merci"},
        )

        assert response.status_code == 404
        body = response.json()
        assert body["exists"] is False
        assert body["searchedPatterns"][0] == "alnilam_9_merci.wav"

    def test_stats(self, client, use_index):
        body = client.get("/api/audio/stats").json()
        assert body == {"available": True, "totalFiles": 3, "languages": ["es", "fr"], "categories": ["greetings"]}

    def test_languages_for_word(self, client, use_index):
        response = client.get("/api/audio/languages/1")
        assert response.json() == {"wordId": "1", "languages": ["es", "fr"]}


# =============================================================================
# Alnilam library
# =============================================================================

class TestAlnilamAudio:

    @pytest.fixture
    def library(self, app, tmp_path):
        greetings = tmp_path / "es" / "greetings"
        greetings.mkdir(parents=True)
        (greetings / "alnilam_1_hola.wav").write_bytes(b"RIFF-hola")
        library = AlnilamLibrary(tmp_path)
        app.dependency_overrides[get_alnilam_library] = lambda: library
        return library

    def test_serves_wav(self, client, library):
        response = client.get(
            "/api/alnilam-audio",
            params={"wordId": "1", "languageCode": "es", "topicName": "Greetings"},
        )

        assert response.status_code == 200
        assert response.content == b"RIFF-hola"
        assert response.headers["content-type"] == "audio/wav"
        assert response.headers["cache-control"] == "public, max-age=31536000"
        assert 'filename="alnilam_1_hola.wav"' in response.headers["content-disposition"]

    @pytest.mark.parametrize("language", ["Spanish", "es-ES", "ES"])
    def test_language_name_or_locale(self, client, library, language):
        response = client.get(
            "/api/alnilam-audio",
            params={"wordId": "1", "languageCode": language, "topicName": "Greetings"},
        )

        assert response.status_code == 200
        assert response.content == b"RIFF-hola"

    def test_unsupported_language(self, client, library):
        response = client.get("/api/alnilam-audio", params={"wordId": "1", "languageCode": "fr"})

        assert response.status_code == 404
        assert response.json()["error"] == "Language not supported"

    def test_missing_word(self, client, library):
        response = client.get("/api/alnilam-audio", params={"wordId": "77", "languageCode": "es"})

        assert response.status_code == 404
        assert response.json()["error"] == "Audio file not found"

    def test_missing_parameters(self, client, library):
        assert client.get("/api/alnilam-audio", params={"wordId": "1"}).status_code == 400


# =============================================================================
# Backblaze B2
# =============================================================================

class TestCloudAudio:

    def test_public_bucket(self, client, use_index, mock_b2):
        response = client.get("/api/universal-audio-cloud", params={"wordId": "1", "languageCode": "fr"})

        assert response.status_code == 200
        assert response.content == b"RIFF-public"
        assert response.headers["x-audio-source"] == "backblaze-b2"
        mock_b2.download_public.assert_awaited_once_with("https://b2.example/fr/greetings/alnilam_1_hello.wav")

    @pytest.mark.parametrize("language", ["Spanish", "es-ES"])
    def test_public_bucket_maps_language(self, client, use_index, mock_b2, language):
        response = client.get("/api/universal-audio-cloud", params={"wordId": "1", "languageCode": language})

        assert response.status_code == 200
        mock_b2.download_public.assert_awaited_once_with("https://b2.example/es/greetings/alnilam_1_hello.wav")

    def test_public_not_found_reports_mapped_code(self, client, use_index, mock_b2):
        response = client.get("/api/universal-audio-cloud", params={"wordId": "404", "languageCode": "fr-FR"})

        assert response.status_code == 404
        assert response.json()["languageCode"] == "fr"

    def test_public_mapping_unavailable(self, client, unavailable_index, mock_b2):
        response = client.get("/api/universal-audio-cloud", params={"wordId": "1", "languageCode": "fr"})
        assert response.status_code == 503

    def test_public_download_failure(self, client, use_index, mock_b2):
        mock_b2.download_public.side_effect = ExternalServiceError("B2 download failed", provider="backblaze")

        response = client.get("/api/universal-audio-cloud", params={"wordId": "1", "languageCode": "fr"})

        assert response.status_code == 502

    def test_private_bucket(self, client, use_index, mock_b2):
        response = client.get("/api/universal-audio", params={"wordId": "2", "languageCode": "es"})

        assert response.status_code == 200
        assert response.content == b"RIFF-private"
        assert response.headers["x-audio-auth"] == "private-bucket"
        mock_b2.get_download_authorization.assert_awaited_once()
        assert mock_b2.get_download_authorization.await_args.args[1] == "es/"
        assert mock_b2.download_private.await_args.args[2] == "es/greetings/alnilam_2_good_morning.wav"

    def test_private_bucket_maps_language(self, client, use_index, mock_b2):
        response = client.get("/api/universal-audio", params={"wordId": "2", "languageCode": "Spanish"})

        assert response.status_code == 200
        assert mock_b2.get_download_authorization.await_args.args[1] == "es/"
        assert mock_b2.download_private.await_args.args[2] == "es/greetings/alnilam_2_good_morning.wav"

    def test_private_not_configured(self, client, use_index, mock_b2):
        mock_b2.configured = False

        response = client.get("/api/universal-audio", params={"wordId": "2", "languageCode": "es"})

        assert response.status_code == 503
        assert response.json()["error"] == "B2 credentials not configured"

    def test_private_authorization_failure(self, client, use_index, mock_b2):
        mock_b2.authorize_account.side_effect = ServiceUnavailableError("B2 authorization failed")

        response = client.get("/api/universal-audio", params={"wordId": "2", "languageCode": "es"})

        assert response.status_code == 503
        assert response.json()["error"] == "B2 authorization failed"

    def test_private_unknown_word(self, client, use_index, mock_b2):
        response = client.get("/api/universal-audio", params={"wordId": "404", "languageCode": "es"})

        assert response.status_code == 404
        mock_b2.download_private.assert_not_called()


# =============================================================================
# TTS
# =============================================================================

class TestAzureTTS:

    @pytest.fixture
    def mock_tts(self, app):
        service = MagicMock()
        service.synthesize = AsyncMock(return_value=b"ID3-mp3")
        service.get_status.return_value = {"available": True, "language_count": 12}
        app.dependency_overrides[get_azure_tts_service] = lambda: service
        return service

    def test_status(self, client, mock_tts):
        assert client.get("/api/tts/azure/status").json() == {"available": True, "language_count": 12}

    def test_synthesize(self, client, mock_tts):
        response = client.post(
            "/api/tts/azure",
            json={"text": "hej", "languageCode": "da", "gender": "male", "speed": 0.8},
        )

        assert response.status_code == 200
        assert response.content == b"ID3-mp3"
        assert response.headers["content-type"] == "audio/mpeg"
        mock_tts.synthesize.assert_awaited_once_with("hej", "da", gender="male", speed=0.8, pitch="medium")

    @pytest.mark.parametrize(
        "error, expected",
        [
            (ValidationError("Language not supported"), 400),
            (ServiceUnavailableError("Azure Speech not configured"), 503),
            (ExternalServiceError("Azure TTS failed", provider="azure"), 502),
        ],
    )
    def test_errors(self, client, mock_tts, error, expected):
        mock_tts.synthesize.side_effect = error

        response = client.post("/api/tts/azure", json={"text": "hej", "languageCode": "da"})

        assert response.status_code == expected
        assert response.json()["detail"] == error.message

    def test_empty_text(self, client, mock_tts):
        response = client.post("/api/tts/azure", json={"text": "", "languageCode": "da"})
        assert response.status_code == 422


class TestUmbriel:

    @pytest.fixture
    def library(self, app, tmp_path):
        (tmp_path / "en").mkdir()
        (tmp_path / "en" / "hello.mp3").write_bytes(b"ID3-hello")
        library = UmbrielLibrary(tmp_path)
        app.dependency_overrides[get_umbriel_library] = lambda: library
        return tmp_path

    def test_manifest(self, client, library):
        (library / "greetings-manifest.json").write_text(json.dumps({"files": ["hello.mp3"]}))
        assert client.get("/api/umbriel/manifest").json() == {"files": ["hello.mp3"]}

    def test_missing_manifest(self, client, library):
        assert client.get("/api/umbriel/manifest").status_code == 404

    def test_audio(self, client, library):
        response = client.get("/api/umbriel/audio/hello.mp3")

        assert response.status_code == 200
        assert response.content == b"ID3-hello"
        assert response.headers["content-type"] == "audio/mpeg"

    def test_invalid_name(self, client, library):
        assert client.get("/api/umbriel/audio/hello.ogg").status_code == 400

    def test_missing_audio(self, client, library):
        assert client.get("/api/umbriel/audio/bye.wav").status_code == 404
