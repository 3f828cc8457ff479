"""
PEM armor parsing and private key classification
"""

import base64
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..exceptions import KeyParseError, UnsupportedKeyTypeError
from .der import TAG_SEQUENCE, DerReader

_BEGIN_RE = re.compile(r'^-----BEGIN ([A-Z0-9 ]+)-----$')
_END_RE = re.compile(r'^-----END ([A-Z0-9 ]+)-----$')


class KeyType(str, Enum):
    """Private key encodings the loader understands"""
    RSA = "RSA"
    EC = "EC"
    PKCS8 = "PKCS8"
    UNSUPPORTED = "UNSUPPORTED"


# PEM label -> key type
PEM_LABELS: Dict[str, KeyType] = {
    "RSA PRIVATE KEY": KeyType.RSA,
    "EC PRIVATE KEY": KeyType.EC,
    "PRIVATE KEY": KeyType.PKCS8,
    "ENCRYPTED PRIVATE KEY": KeyType.PKCS8,
}


@dataclass
class PemBlock:
    """
    A single parsed PEM block

    Attributes:
        label: Text between ``BEGIN``/``END`` (empty for unarmored DER)
        headers: RFC 1421 style headers such as ``Proc-Type`` and ``DEK-Info``
        body: Base64 body text with all whitespace removed
        der: Raw DER bytes when the input was not armored
    """
    label: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    der: Optional[bytes] = None

    @property
    def key_type(self) -> KeyType:
        if self.der is not None:
            return KeyType.PKCS8
        return PEM_LABELS.get(self.label, KeyType.UNSUPPORTED)

    @property
    def is_encrypted(self) -> bool:
        return self.headers.get("Proc-Type", "").replace(" ", "") == "4,ENCRYPTED"

    def decode_body(self) -> bytes:
        """Strict base64 decode of the body."""
        if self.der is not None:
            return self.der
        return base64.b64decode(self.body, validate=True)


def _non_blank_lines(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def parse_pem(text: str) -> PemBlock:
    """
    Parse PEM armored key text.

    The first and last non-blank lines must be matching BEGIN/END armor.
    Header lines (``Name: value``) directly after BEGIN are collected up to
    the first blank line.

    Raises:
        UnsupportedKeyTypeError: If the armor is missing or mismatched
    """
    lines = _non_blank_lines(text)
    if len(lines) < 2:
        raise UnsupportedKeyTypeError("Either the key is invalid or key is not supported")

    begin = _BEGIN_RE.match(lines[0])
    end = _END_RE.match(lines[-1])
    if not begin or not end or begin.group(1) != end.group(1):
        raise UnsupportedKeyTypeError(
            "Either the key is invalid or key is not supported",
            {"reason": "missing or mismatched PEM armor"}
        )

    headers: Dict[str, str] = {}
    body_lines: List[str] = []

    raw_lines = text.strip().splitlines()[1:-1]
    in_headers = True
    for raw in raw_lines:
        line = raw.strip()
        if in_headers:
            if not line:
                in_headers = False
                continue
            if ':' in line and not body_lines:
                name, _, value = line.partition(':')
                headers[name.strip()] = value.strip()
                continue
            in_headers = False
        if line:
            body_lines.append(line)

    return PemBlock(label=begin.group(1), headers=headers, body="".join(body_lines))


def is_der_sequence(data: bytes) -> bool:
    """True if ``data`` is exactly one DER SEQUENCE with no trailing bytes."""
    if data[:1] != bytes([TAG_SEQUENCE]):
        return False
    reader = DerReader(data)
    try:
        reader.enter_sequence()
    except KeyParseError:
        return False
    return reader.at_end()


def load_key_block(data: bytes) -> PemBlock:
    """
    Classify raw key file contents.

    Input that is a single well-formed DER SEQUENCE is treated as unarmored
    PKCS#8; everything else goes through :func:`parse_pem`. A text file
    that merely starts with ``0`` (also the SEQUENCE tag byte) is not DER.
    """
    if is_der_sequence(data):
        return PemBlock(label="", der=bytes(data))

    try:
        text = data.decode('ascii')
    except UnicodeDecodeError as e:
        raise UnsupportedKeyTypeError(
            "Either the key is invalid or key is not supported",
            {"reason": "key file is neither PEM text nor DER"}
        ) from e
    return parse_pem(text)
