"""
Unit tests for the local audio sources: the Backblaze URL index, the
Alnilam folder tree and the Umbriel greetings.
"""

import json

import pytest

from app.infrastructure.audio.alnilam_library import AlnilamLibrary
from app.infrastructure.audio.umbriel import UmbrielLibrary, media_type_for
from app.infrastructure.audio.url_index import (
    AudioUrlIndex,
    candidate_file_names,
    extract_word_id,
)
from app.infrastructure.exceptions import NotFoundError, ValidationError


class TestAudioUrlIndex:

    def test_lookup_by_path(self, audio_index):
        url = audio_index.get_url_by_path("es/greetings/alnilam_1_hello.wav")
        assert url == "https://b2.example/es/greetings/alnilam_1_hello.wav"
        assert audio_index.get_url_by_path("es/greetings/missing.wav") is None

    def test_lookup_by_word_and_language(self, audio_index):
        entry = audio_index.find("2", "es")
        assert entry.file_name == "alnilam_2_good_morning.wav"
        assert audio_index.has_audio("2", "fr") is False

    def test_available_languages(self, audio_index):
        assert audio_index.get_available_languages("1") == ["es", "fr"]
        assert audio_index.get_available_languages("99") == []

    def test_stats(self, audio_index):
        stats = audio_index.get_stats()
        assert stats["totalFiles"] == 3
        assert stats["languages"] == ["es", "fr"]
        assert stats["categories"] == ["greetings"]

    def test_malformed_and_blank_rows_skipped(self):
        text = (
            "localPath,backblazeUrl,language,category,fileName\n"
            "\n"
            "only,three,fields\n"
            "de/numbers/alnilam_7_one.wav,https://b2.example/x.wav,de,numbers,alnilam_7_one.wav\n"
        )
        index = AudioUrlIndex.parse(text)
        assert len(index) == 1
        assert index.find("7", "de") is not None

    def test_first_duplicate_wins(self):
        text = (
            "localPath,backblazeUrl,language,category,fileName\n"
            "es/a/alnilam_3_x.wav,https://first,es,a,alnilam_3_x.wav\n"
            "es/b/alnilam_3_x.wav,https://second,es,b,alnilam_3_x.wav\n"
        )
        assert AudioUrlIndex.parse(text).find("3", "es").url == "https://first"

    def test_missing_file_is_unavailable(self, tmp_path):
        index = AudioUrlIndex.from_file(tmp_path / "missing.csv")
        assert index.available is False
        assert len(index) == 0

    def test_from_file(self, tmp_path, audio_csv_text):
        path = tmp_path / "urls.csv"
        path.write_text(audio_csv_text, encoding="utf-8")
        index = AudioUrlIndex.from_file(path)
        assert index.available is True
        assert len(index) == 3


class TestFileNames:

    def test_extract_word_id(self):
        assert extract_word_id("alnilam_42_hello.wav") == "42"
        assert extract_word_id("hello.wav") is None

    def test_candidate_order(self):
        assert candidate_file_names("5", "Good Morning") == [
            "alnilam_5_good_morning.wav",
            "alnilam_5_good morning.wav",
            "alnilam_5.wav",
            "5_good_morning.wav",
            "good_morning.wav",
        ]


class TestAlnilamLibrary:

    @pytest.fixture
    def library(self, tmp_path):
        greetings = tmp_path / "es" / "greetings"
        greetings.mkdir(parents=True)
        (greetings / "alnilam_1_hola.wav").write_bytes(b"RIFF-hola")
        numbers = tmp_path / "es" / "numbers"
        numbers.mkdir()
        (numbers / "alnilam_20_uno.wav").write_bytes(b"RIFF-uno")
        (numbers / "notes.txt").write_text("ignored")
        return AlnilamLibrary(tmp_path)

    def test_find_in_topic(self, library):
        path = library.find("es", "1", "greetings")
        assert path.name == "alnilam_1_hola.wav"

    def test_find_without_topic_searches_all(self, library):
        assert library.find("es", "20").name == "alnilam_20_uno.wav"

    def test_word_id_prefix_is_exact(self, library):
        assert library.find("es", "2") is None

    def test_unknown_language(self, library):
        assert library.language_dir("fr") is None
        assert library.find("fr", "1") is None

    def test_traversal_rejected(self, library):
        assert library.language_dir("..") is None
        assert library.find("es", "1", "../es") is None


class TestUmbrielLibrary:

    @pytest.fixture
    def library(self, tmp_path):
        (tmp_path / "en").mkdir()
        (tmp_path / "en" / "hello.wav").write_bytes(b"RIFF")
        (tmp_path / "secret.wav").write_bytes(b"nope")
        return UmbrielLibrary(tmp_path)

    def test_manifest(self, library, tmp_path):
        (tmp_path / "greetings-manifest.json").write_text(json.dumps({"files": ["hello.wav"]}))
        assert library.load_manifest() == {"files": ["hello.wav"]}

    def test_missing_manifest(self, library):
        with pytest.raises(NotFoundError):
            library.load_manifest()

    def test_resolve_audio(self, library):
        assert library.resolve_audio("hello.wav").read_bytes() == b"RIFF"

    def test_missing_audio(self, library):
        with pytest.raises(NotFoundError):
            library.resolve_audio("bye.mp3")

    @pytest.mark.parametrize("filename", ["../secret.wav", "..wav", ".hidden.wav", "hello.ogg", "a/b.wav"])
    def test_invalid_names(self, library, filename):
        with pytest.raises(ValidationError):
            library.resolve_audio(filename)

    def test_media_types(self, tmp_path):
        assert media_type_for(tmp_path / "a.wav") == "audio/wav"
        assert media_type_for(tmp_path / "a.MP3") == "audio/mpeg"
        assert media_type_for(tmp_path / "a.bin") == "application/octet-stream"
