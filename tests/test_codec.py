# Tests for the `name:secret` entry codec and name matchers

import pytest

from cipherkeep.errors import FormatError, InvalidEntryError
from cipherkeep.store import Contains, Entry, ExactName, decode, encode, validate_entry


class TestEncodeDecode:
    def test_round_trip_preserves_order(self):
        entries = [Entry("github", "hunter2"), Entry("bank", "1234"), Entry("mail", "")]
        assert decode(encode(entries)) == entries

    def test_one_line_per_entry(self):
        assert encode([Entry("a", "1"), Entry("b", "2")]) == b"a:1\nb:2\n"

    def test_secret_may_contain_delimiter(self):
        assert decode(b"db:postgres://u:p@host:5432\n") == [
            Entry("db", "postgres://u:p@host:5432")
        ]

    def test_blank_lines_and_crlf(self):
        assert decode(b"\na:1\r\n\n   \nb:2") == [Entry("a", "1"), Entry("b", "2")]

    def test_empty_input(self):
        assert decode(b"") == []
        assert encode([]) == b""

    def test_unicode(self):
        entries = [Entry("café", "pässwörd")]
        assert decode(encode(entries)) == entries


class TestRejectMalformed:
    def test_missing_separator_names_line_without_content(self):
        with pytest.raises(FormatError) as info:
            decode(b"a:1\ntopsecretvalue\n")
        assert "Line 2" in str(info.value)
        assert "topsecretvalue" not in str(info.value)

    def test_empty_name(self):
        with pytest.raises(FormatError, match="Line 1"):
            decode(b":orphan\n")

    def test_not_utf8(self):
        with pytest.raises(FormatError, match="UTF-8"):
            decode(b"a:\xff\xfe\n")


class TestValidateEntry:
    @pytest.mark.parametrize("name", ["", "a:b", "two\nlines", "cr\r"])
    def test_bad_names(self, name):
        with pytest.raises(InvalidEntryError):
            validate_entry(name, "s")

    def test_secret_with_newline(self):
        with pytest.raises(InvalidEntryError):
            validate_entry("ok", "multi\nline")

    def test_invalid_entry_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_entry("", "s")

    def test_accepts_colon_in_secret(self):
        validate_entry("ok", "a:b:c")


class TestMatchers:
    def test_contains_is_case_sensitive_substring(self):
        m = Contains("Hub")
        assert m.matches("GitHub")
        assert not m.matches("github")

    def test_empty_contains_matches_everything(self):
        assert Contains("").matches("anything")

    def test_exact_name(self):
        m = ExactName("mail")
        assert m.matches("mail")
        assert not m.matches("gmail")
        assert not m.matches("Mail")
