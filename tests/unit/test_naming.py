"""
Base name, output filename and object key derivation.
"""

from datetime import datetime, timedelta, timezone

import pytest

from services.naming import build_object_key, build_output_filename, derive_base_name


class TestDeriveBaseName:

    @pytest.mark.parametrize("url, expected", [
        ("https://example.com/file1.tar.zst", "file1"),
        ("https://example.com/a/b/dataset-2024.tar.zst", "dataset-2024"),
        ("https://example.com/a/file1.tar.zst?sig=abc&se=2030", "file1"),
        ("https://example.com/a/file1.tar.zst#frag", "file1"),
        ("https://example.com/a/my%20archive.tar.zst", "my archive"),
        ("https://example.com/a/folder/", "folder"),
    ])
    def test_strips_suffix_and_url_noise(self, url, expected):
        assert derive_base_name(url) == expected

    def test_other_suffix_is_kept(self):
        assert derive_base_name("https://example.com/file1.tar.gz") == "file1.tar.gz"
        assert derive_base_name("https://example.com/data/archive.zip") == "archive.zip"

    def test_suffix_match_is_case_sensitive(self):
        assert derive_base_name("https://example.com/DATA.TAR.ZST") == "DATA.TAR.ZST"

    def test_suffix_only_stripped_once(self):
        assert derive_base_name("https://example.com/x.tar.zst.tar.zst") == "x.tar.zst"

    def test_control_characters_from_escapes_are_dropped(self):
        assert derive_base_name("https://example.com/x%0d%0aevil.tar.zst") == "xevil"
        assert derive_base_name("https://example.com/%00%0a.tar.zst") == "archive"

    @pytest.mark.parametrize("url", [
        "https://example.com",
        "https://example.com/",
        "https://example.com/.tar.zst",
    ])
    def test_fallback_when_nothing_left(self, url):
        assert derive_base_name(url) == "archive"


class TestBuildOutputFilename:

    def test_appends_zip(self):
        assert build_output_filename("file1") == "file1.zip"


class TestBuildObjectKey:

    NOW = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_layout(self):
        assert build_object_key("file1", "zips", now=self.NOW) == "zips/file1-20250102T030405Z.zip"

    def test_empty_prefix(self):
        assert build_object_key("file1", "", now=self.NOW) == "file1-20250102T030405Z.zip"

    def test_prefix_slashes_normalized(self):
        assert build_object_key("file1", "/out/zips/", now=self.NOW) == "out/zips/file1-20250102T030405Z.zip"

    def test_non_utc_clock_is_converted(self):
        local = self.NOW.astimezone(timezone(timedelta(hours=5)))
        assert build_object_key("f", "p", now=local) == "p/f-20250102T030405Z.zip"

    def test_default_clock_is_utc_now(self):
        key = build_object_key("f", "p")
        assert key.startswith("p/f-")
        assert key.endswith("Z.zip")
