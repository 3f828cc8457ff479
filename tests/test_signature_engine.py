"""
Test suite for the signature engine

Signatures produced by the SDK are verified with the matching public key
using cryptography's own verification primitives.
"""

import base64

import pytest
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from httpsig_sdk.crypto import ECKeyMaterial, ecdsa_der_to_raw, ecdsa_raw_to_der, load_private_key
from httpsig_sdk.crypto.keys import RSAKeyMaterial
from httpsig_sdk.exceptions import UnsupportedAlgorithmError, UnsupportedKeyTypeError
from httpsig_sdk.signing import (
    ECDSASigner,
    HashAlgorithm,
    Hasher,
    RSASigner,
    Signer,
    SigningAlgorithm,
    create_signer,
    sign_string,
)
from httpsig_sdk.signing.signature_engine import create_key_signer

SIGNING_STRING = "(request-target): get /v2/pet/1\n(created): 1610000000"


@pytest.fixture
def rsa_material(rsa_key_path) -> RSAKeyMaterial:
    return load_private_key(rsa_key_path)


@pytest.fixture
def ec_material(ec_private_key) -> ECKeyMaterial:
    return ECKeyMaterial(
        curve=ec_private_key.curve,
        private_value=ec_private_key.private_numbers().private_value
    )


class TestRsaSigning:
    """Test RSA PKCS#1 v1.5 and PSS signatures"""

    def test_pkcs1v15_round_trip(self, rsa_material, rsa_private_key):
        signature = base64.b64decode(sign_string(rsa_material, SIGNING_STRING))
        rsa_private_key.public_key().verify(
            signature, SIGNING_STRING.encode(), padding.PKCS1v15(), hashes.SHA256()
        )

    def test_pkcs1v15_is_deterministic(self, rsa_material):
        assert sign_string(rsa_material, SIGNING_STRING) == sign_string(rsa_material, SIGNING_STRING)

    def test_pss_round_trip(self, rsa_material, rsa_private_key):
        signature = base64.b64decode(sign_string(
            rsa_material, SIGNING_STRING, HashAlgorithm.SHA256, SigningAlgorithm.RSASSA_PSS
        ))
        rsa_private_key.public_key().verify(
            signature,
            SIGNING_STRING.encode(),
            padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=32),
            hashes.SHA256()
        )

    def test_pss_sha512(self, rsa_material, rsa_private_key):
        signature = base64.b64decode(sign_string(
            rsa_material, SIGNING_STRING, HashAlgorithm.SHA512, SigningAlgorithm.RSASSA_PSS
        ))
        rsa_private_key.public_key().verify(
            signature,
            SIGNING_STRING.encode(),
            padding.PSS(mgf=padding.MGF1(hashes.SHA512()), salt_length=64),
            hashes.SHA512()
        )

    def test_wrong_message_fails_verification(self, rsa_material, rsa_private_key):
        signature = base64.b64decode(sign_string(rsa_material, SIGNING_STRING))
        with pytest.raises(InvalidSignature):
            rsa_private_key.public_key().verify(
                signature, b"tampered", padding.PKCS1v15(), hashes.SHA256()
            )

    def test_signature_length_matches_modulus(self, rsa_material):
        signature = RSASigner(rsa_material, Hasher(HashAlgorithm.SHA256), SigningAlgorithm.PKCS1_V15).sign("x")
        assert len(signature) == 256

    def test_unknown_padding(self, rsa_material):
        with pytest.raises(UnsupportedAlgorithmError):
            RSASigner(rsa_material, Hasher(HashAlgorithm.SHA256), "RSA-OAEP")


class TestEcdsaSigning:
    """Test ECDSA signatures and DER re-encoding"""

    def test_der_signature_verifies(self, ec_material, ec_private_key):
        signature = base64.b64decode(sign_string(ec_material, SIGNING_STRING))
        ec_private_key.public_key().verify(signature, SIGNING_STRING.encode(), ec.ECDSA(hashes.SHA256()))

    def test_der_round_trip_reproduces_raw(self, ec_material):
        signer = ECDSASigner(ec_material, Hasher(HashAlgorithm.SHA256))
        digest = signer.hasher.hash(SIGNING_STRING)

        raw = signer.sign_raw(digest)
        assert len(raw) == 64

        assert ecdsa_der_to_raw(ecdsa_raw_to_der(raw), 32) == raw

    def test_der_matches_cryptography_encoding(self, ec_material):
        signer = ECDSASigner(ec_material, Hasher(HashAlgorithm.SHA256))
        der = signer.sign(SIGNING_STRING)
        raw = ecdsa_der_to_raw(der, 32)

        r = int.from_bytes(raw[:32], "big")
        s = int.from_bytes(raw[32:], "big")
        assert encode_dss_signature(r, s) == der

    def test_padding_setting_is_ignored_for_ec(self, ec_material, ec_private_key):
        signature = base64.b64decode(sign_string(
            ec_material, SIGNING_STRING, HashAlgorithm.SHA512, SigningAlgorithm.RSASSA_PSS
        ))
        ec_private_key.public_key().verify(signature, SIGNING_STRING.encode(), ec.ECDSA(hashes.SHA512()))

    def test_fixture_key_signs(self, ec_key_path):
        material = load_private_key(ec_key_path)
        public_key = material.to_private_key().public_key()
        signature = base64.b64decode(sign_string(material, SIGNING_STRING))
        public_key.verify(signature, SIGNING_STRING.encode(), ec.ECDSA(hashes.SHA256()))


class TestSignerSelection:
    """Test signer dispatch on key type"""

    def test_dispatch(self, rsa_material, ec_material):
        assert isinstance(create_key_signer(rsa_material), RSASigner)
        assert isinstance(create_key_signer(ec_material), ECDSASigner)

    def test_unknown_material(self):
        with pytest.raises(UnsupportedKeyTypeError):
            create_key_signer(object())

    def test_unknown_hash(self, rsa_material):
        with pytest.raises(UnsupportedAlgorithmError):
            create_key_signer(rsa_material, "SHA-1")

    def test_signer_is_abstract(self):
        with pytest.raises(TypeError):
            Signer(Hasher(HashAlgorithm.SHA256))

    def test_factory_names_are_distinct(self):
        assert create_key_signer is not create_signer
        assert create_signer.__module__ == "httpsig_sdk.signing.http_signer"
