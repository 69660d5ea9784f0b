"""
Unit tests for HTTP validator helpers
"""

import os
import sys

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.utils import generate_etag, is_fresh, qs_toggle


class TestGenerateEtag:
    """Test cases for generate_etag"""

    def test_empty_body(self):
        assert generate_etag("") == '"0-2jmj7l5rSw0yVb/vlWAYkK/YBwk"'

    def test_str_and_bytes_agree(self):
        assert generate_etag('{"a":1}') == generate_etag(b'{"a":1}')

    def test_length_prefix_is_byte_length_hex(self):
        tag = generate_etag("é" * 10)  # 20 bytes in UTF-8
        assert tag.startswith('"14-')
        assert tag.endswith('"')
        assert len(tag.split("-", 1)[1]) == 28  # 27 chars + closing quote

    def test_different_bodies_differ(self):
        assert generate_etag("a") != generate_etag("b")


class TestIsFresh:
    """Test cases for is_fresh"""

    ETAG = '"5-abc"'

    def test_no_conditional_headers(self):
        assert is_fresh({}, self.ETAG) is False

    def test_matching_if_none_match(self):
        assert is_fresh({"If-None-Match": self.ETAG}, self.ETAG) is True

    def test_weak_match(self):
        assert is_fresh({"if-none-match": f"W/{self.ETAG}"}, self.ETAG) is True

    def test_list_match(self):
        assert is_fresh({"if-none-match": f'"other", {self.ETAG}'}, self.ETAG) is True

    def test_mismatch(self):
        assert is_fresh({"if-none-match": '"other"'}, self.ETAG) is False

    def test_star(self):
        assert is_fresh({"if-none-match": "*"}, self.ETAG) is True

    def test_no_cache_forces_stale(self):
        headers = {"if-none-match": self.ETAG, "cache-control": "max-age=0, no-cache"}
        assert is_fresh(headers, self.ETAG) is False

    def test_if_modified_since_without_last_modified(self):
        headers = {"if-modified-since": "Mon, 01 Jan 2024 00:00:00 GMT"}
        assert is_fresh(headers, self.ETAG) is False

    def test_if_modified_since_with_older_last_modified(self):
        headers = {"if-modified-since": "Mon, 01 Jan 2024 00:00:00 GMT"}
        assert is_fresh(headers, self.ETAG, last_modified="Sun, 31 Dec 2023 00:00:00 GMT") is True


class TestQsToggle:
    """Test cases for qs_toggle"""

    def test_truthy_values(self):
        for v in ("", "true", "1"):
            assert qs_toggle({"debug": v}, "debug") is True

    def test_falsy_values(self):
        for v in ("false", "0", "yes"):
            assert qs_toggle({"debug": v}, "debug") is False
        assert qs_toggle({}, "debug") is False
