"""Tests for the content hasher."""

import hashlib

import pytest

from shorturl.core.hashing import Hasher, HashingError


class TestHasher:

    def test_digest_matches_sha256(self):
        hasher = Hasher("sha256")
        assert hasher.digest("https://example.com/a") == hashlib.sha256(b"https://example.com/a").digest()

    def test_digest_is_deterministic_across_instances(self):
        assert Hasher().digest("same input") == Hasher().digest("same input")

    def test_non_ascii_input(self):
        value = "https://例え.jp/パス"
        assert Hasher().digest(value) == hashlib.sha256(value.encode("utf-8")).digest()

    def test_stronger_algorithm_accepted(self):
        assert len(Hasher("sha512").digest("x")) == 64

    @pytest.mark.parametrize("algorithm", ["md5", "sha1"])
    def test_short_digests_rejected(self, algorithm):
        with pytest.raises(HashingError):
            Hasher(algorithm)

    def test_unknown_algorithm_rejected(self):
        with pytest.raises(HashingError):
            Hasher("not-a-hash")

    def test_unencodable_input(self):
        with pytest.raises(HashingError):
            Hasher().digest("\ud800")

    def test_non_string_input(self):
        with pytest.raises(HashingError):
            Hasher().digest(12345)
