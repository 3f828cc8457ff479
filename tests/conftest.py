"""
Shared fixtures for the HTTP signing test suite
"""

from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

FIXTURES_DIR = Path(__file__).parent / "fixtures"

RSA_KEY_PASSPHRASE = "correct-horse"
EC_KEY_PASSPHRASE = b"ec-secret"

GOLDEN_KEY_ID = "test-key"
GOLDEN_CREATED = 1610000000
GOLDEN_SIGNING_HEADERS = ("(request-target)", "(created)", "digest")
EMPTY_SHA256_DIGEST = "SHA-256=47DEQpj8HBSa+/TImW+5JCeuQeRkm5NMpJWZG3hSuFU="


@pytest.fixture
def rsa_key_path() -> Path:
    """Unencrypted PKCS#1 RSA 2048 key"""
    return FIXTURES_DIR / "rsa_2048.pem"


@pytest.fixture
def rsa_encrypted_key_path() -> Path:
    """Same RSA key, legacy OpenSSL DES-EDE3-CBC encrypted"""
    return FIXTURES_DIR / "rsa_2048_des3.pem"


@pytest.fixture
def ec_key_path() -> Path:
    """SEC1 P-256 key"""
    return FIXTURES_DIR / "ec_p256.pem"


@pytest.fixture
def golden_signature() -> str:
    return (FIXTURES_DIR / "golden_signature.txt").read_text().strip()


@pytest.fixture
def rsa_private_key(rsa_key_path):
    """The fixture RSA key loaded directly with cryptography, for verification"""
    return serialization.load_pem_private_key(rsa_key_path.read_bytes(), password=None)


@pytest.fixture
def ec_private_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def write_key(tmp_path):
    """Write a generated private key to a temporary file in the requested format"""
    def _write(key, fmt, encoding=serialization.Encoding.PEM, password=None, name="key.pem"):
        encryption = (
            serialization.BestAvailableEncryption(password)
            if password is not None
            else serialization.NoEncryption()
        )
        path = tmp_path / name
        path.write_bytes(key.private_bytes(encoding, fmt, encryption))
        return path
    return _write
