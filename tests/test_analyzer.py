import hashlib
from datetime import timezone

import pytest
from pydantic import ValidationError

from app.analyzer import (
    analyze_string,
    character_frequency,
    content_hash,
    count_words,
    is_palindrome,
)
from app.errors import TypeMismatch


class TestAnalyzeString:
    """Tests for the record builder."""

    def test_basic_analysis(self):
        record = analyze_string("hello world")
        assert record.value == "hello world"
        assert record.length == 11
        assert record.word_count == 2
        assert record.is_palindrome is False
        assert record.unique_character_count == 8  # Includes space as a character

    def test_empty_string(self):
        record = analyze_string("")
        assert record.length == 0
        assert record.word_count == 0
        assert record.unique_character_count == 0
        assert record.character_frequency == {}
        assert record.distinct_characters == ()
        # The empty string reads the same both ways
        assert record.is_palindrome is True

    def test_astral_code_point_counts_once(self):
        record = analyze_string("a👍b")
        assert record.length == 3
        assert record.character_frequency["👍"] == 1
        assert len("a👍b".encode("utf-16-le")) // 2 == 4  # storage units would over-count

    def test_value_is_stored_verbatim(self):
        value = "  Mixed CASE\twith\ttabs  "
        assert analyze_string(value).value == value

    def test_created_at_is_utc(self):
        record = analyze_string("test")
        assert record.created_at.tzinfo == timezone.utc

    def test_record_is_immutable(self):
        record = analyze_string("racecar")
        with pytest.raises(ValidationError):
            record.length = 1

    @pytest.mark.parametrize("bad", [None, 123, b"bytes", ["a"]])
    def test_non_text_raises_type_mismatch(self, bad):
        with pytest.raises(TypeMismatch) as exc_info:
            analyze_string(bad)
        assert exc_info.value.received == type(bad).__name__
        # Still a TypeError for callers that only know the builtin
        assert isinstance(exc_info.value, TypeError)

    @pytest.mark.parametrize(
        "value",
        ["", "a", "hello world", "Mississippi", "a👍b👍c", "tab\tand\nnewline", "ÀÉÎõü"],
    )
    def test_frequency_accounts_for_every_code_point(self, value):
        record = analyze_string(value)
        assert sum(record.character_frequency.values()) == record.length
        assert len(record.distinct_characters) == record.unique_character_count
        assert set(record.distinct_characters) == set(record.character_frequency)
        assert len(set(record.distinct_characters)) == len(record.distinct_characters)


class TestPalindrome:
    def test_case_insensitive(self):
        assert is_palindrome("Racecar") is True

    def test_internal_space_breaks_symmetry(self):
        assert is_palindrome("race car") is False

    def test_punctuation_not_stripped(self):
        assert is_palindrome("A man, a plan, a canal: Panama") is False
        assert is_palindrome("abba!") is False

    def test_case_folding_beyond_lowercase(self):
        # casefold() maps the final sigma to σ, lower() does not
        assert is_palindrome("σας") is True
        assert is_palindrome("ΣΑς") is True


class TestWordCount:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("", 0),
            ("   ", 0),
            ("\t\n", 0),
            ("one", 1),
            ("  padded  ", 1),
            ("two  spaces", 2),
            ("tabs\tand\nnewlines here", 4),
        ],
    )
    def test_count_words(self, value, expected):
        assert count_words(value) == expected


class TestCharacterFrequency:
    def test_includes_spaces(self):
        freq = character_frequency("hello world")
        assert freq[" "] == 1
        assert freq["h"] == 1
        assert freq["l"] == 3
        assert freq["o"] == 2

    def test_case_sensitive_keys(self):
        freq = character_frequency("Aa")
        assert freq == {"A": 1, "a": 1}


class TestContentHash:
    def test_sha256_of_utf8_bytes(self):
        expected = hashlib.sha256("héllo".encode("utf-8")).hexdigest()
        assert content_hash("héllo") == expected
        assert analyze_string("héllo").id == expected

    def test_lowercase_hex_digest(self):
        digest = content_hash("hello")
        assert len(digest) == 64
        assert digest == digest.lower()
        int(digest, 16)

    def test_deterministic(self):
        assert analyze_string("same input").id == analyze_string("same input").id

    def test_no_normalization(self):
        assert content_hash("Test") != content_hash("test")
        assert content_hash("test ") != content_hash("test")
        # precomposed vs combining accent are different inputs
        assert content_hash("\u00e9") != content_hash("e\u0301")

    def test_lone_surrogate_still_hashes(self):
        digest = content_hash("a\ud800b")
        assert digest == content_hash("a\ud800b")
        assert len(digest) == 64

    def test_rejects_non_text(self):
        with pytest.raises(TypeMismatch):
            content_hash(b"hello")
