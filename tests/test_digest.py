"""
Test suite for body digest calculation
"""

import base64
import hashlib

import pytest

from httpsig_sdk.exceptions import UnsupportedAlgorithmError
from httpsig_sdk.signing import HashAlgorithm, calculate_digest, serialize_body

from conftest import EMPTY_SHA256_DIGEST


class TestCalculateDigest:
    """Test Digest header values"""

    def test_empty_body(self):
        assert calculate_digest("").header_value == EMPTY_SHA256_DIGEST

    def test_none_body_hashes_empty_bytes(self):
        assert calculate_digest(None).header_value == EMPTY_SHA256_DIGEST
        assert calculate_digest(b"").header_value == EMPTY_SHA256_DIGEST

    def test_sha512(self):
        digest = calculate_digest(b"hello", HashAlgorithm.SHA512)
        expected = base64.b64encode(hashlib.sha512(b"hello").digest()).decode()

        assert digest.algorithm == HashAlgorithm.SHA512
        assert digest.digest == expected
        assert digest.header_value == f"SHA-512={expected}"

    def test_algorithm_given_as_string(self):
        assert calculate_digest("", "SHA-256").header_value == EMPTY_SHA256_DIGEST

    def test_text_body_is_utf8(self):
        expected = base64.b64encode(hashlib.sha256("héllo".encode("utf-8")).digest()).decode()
        assert calculate_digest("héllo").digest == expected

    def test_json_body_is_compact(self):
        body = {"name": "doggie", "tags": [1, 2]}
        assert serialize_body(body) == b'{"name":"doggie","tags":[1,2]}'
        expected = base64.b64encode(hashlib.sha256(b'{"name":"doggie","tags":[1,2]}').digest()).decode()
        assert calculate_digest(body).digest == expected

    def test_unsupported_algorithm(self):
        with pytest.raises(UnsupportedAlgorithmError):
            calculate_digest(b"", "MD5")
