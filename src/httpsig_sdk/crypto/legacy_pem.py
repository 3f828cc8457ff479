"""
Legacy OpenSSL PEM decryption

Traditional OpenSSL encrypted PEM files carry their cipher parameters in
``Proc-Type``/``DEK-Info`` header lines and derive the symmetric key from the
passphrase with an iterated MD5 construction (``EVP_BytesToKey`` with one
iteration per round). Only ``DES-EDE3-CBC`` is accepted here.
"""

import logging
import math
from typing import Dict

from cryptography.hazmat.decrepit.ciphers.algorithms import TripleDES
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, modes

from ..exceptions import KeyDecryptionError
from .secret import Passphrase, zero_buffer

logger = logging.getLogger(__name__)

SUPPORTED_DEK_CIPHER = "DES-EDE3-CBC"
DES_EDE3_KEY_LENGTH = 24
DES_BLOCK_SIZE = 8


def derive_legacy_key(
    password: bytes,
    salt: bytes,
    key_length: int = DES_EDE3_KEY_LENGTH,
    algorithm: hashes.HashAlgorithm = None
) -> bytearray:
    """
    Derive a symmetric key the way OpenSSL does for legacy PEM encryption.

    Round 1 hashes ``password + salt``; each later round hashes the previous
    digest followed by ``password + salt`` again. Digests are concatenated
    until ``key_length`` bytes are available, so the number of rounds is
    ``ceil(key_length / digest_size)``.

    Args:
        password: Passphrase bytes
        salt: Salt from the DEK-Info header (8 bytes for 3DES)
        key_length: Number of key bytes to produce
        algorithm: Hash algorithm, MD5 by default

    Returns:
        bytearray: Derived key; the caller is responsible for zeroing it
    """
    algorithm = algorithm or hashes.MD5()
    rounds = math.ceil(key_length / algorithm.digest_size)

    data = bytearray(password) + bytearray(salt)
    material = bytearray()
    previous = bytearray()
    try:
        for _ in range(rounds):
            digest = hashes.Hash(algorithm)
            digest.update(bytes(previous + data))
            zero_buffer(previous)
            previous = bytearray(digest.finalize())
            material += previous
        return material[:key_length]
    finally:
        zero_buffer(data)
        zero_buffer(previous)
        zero_buffer(material)


def parse_dek_info(headers: Dict[str, str]) -> bytes:
    """
    Validate the encryption headers and return the salt.

    Raises:
        KeyDecryptionError: If the headers are missing or name another cipher
    """
    proc_type = headers.get("Proc-Type", "").replace(" ", "")
    if proc_type != "4,ENCRYPTED":
        raise KeyDecryptionError(
            "Encrypted PEM must start with 'Proc-Type: 4,ENCRYPTED'",
            {"proc_type": proc_type}
        )

    dek_info = headers.get("DEK-Info", "")
    cipher_name, _, salt_hex = dek_info.partition(",")
    if cipher_name.strip() != SUPPORTED_DEK_CIPHER:
        raise KeyDecryptionError(
            f"Unsupported PEM encryption cipher: {cipher_name.strip() or '<missing>'}",
            {"supported": SUPPORTED_DEK_CIPHER}
        )

    try:
        salt = bytes.fromhex(salt_hex.strip())
    except ValueError as e:
        raise KeyDecryptionError("DEK-Info salt is not valid hex") from e

    if len(salt) != DES_BLOCK_SIZE:
        raise KeyDecryptionError(
            f"DEK-Info salt must be {DES_BLOCK_SIZE} bytes",
            {"salt_length": len(salt)}
        )
    return salt


def decrypt_legacy_pem(headers: Dict[str, str], ciphertext: bytes, passphrase: Passphrase) -> bytes:
    """
    Decrypt the body of a legacy encrypted PEM key.

    Args:
        headers: PEM headers (``Proc-Type`` and ``DEK-Info``)
        ciphertext: Base64-decoded encrypted body
        passphrase: Key passphrase

    Returns:
        bytes: Plaintext DER

    Raises:
        KeyDecryptionError: On missing passphrase, bad headers or cipher failure
    """
    if passphrase is None:
        raise KeyDecryptionError("Private key is encrypted but no passphrase was provided")

    salt = parse_dek_info(headers)
    if not ciphertext or len(ciphertext) % DES_BLOCK_SIZE:
        raise KeyDecryptionError(
            "Encrypted key length is not a multiple of the cipher block size",
            {"length": len(ciphertext)}
        )

    key = bytearray()
    plaintext = bytearray()
    try:
        with passphrase.reveal() as password:
            key = derive_legacy_key(bytes(password), salt)

        # OpenSSL reuses the DEK-Info salt as the CBC IV
        decryptor = Cipher(TripleDES(bytes(key)), modes.CBC(salt)).decryptor()
        plaintext = bytearray(decryptor.update(ciphertext) + decryptor.finalize())

        unpadder = padding.PKCS7(DES_BLOCK_SIZE * 8).unpadder()
        try:
            result = unpadder.update(bytes(plaintext)) + unpadder.finalize()
        except ValueError as e:
            raise KeyDecryptionError("Failed to decrypt private key: bad passphrase or corrupt data") from e

        logger.debug(f"Decrypted legacy {SUPPORTED_DEK_CIPHER} private key")
        return result
    finally:
        zero_buffer(key)
        zero_buffer(plaintext)
