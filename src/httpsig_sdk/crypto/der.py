"""
Minimal ASN.1 DER reader and writer

Only the primitives needed by the SDK are implemented: INTEGER and SEQUENCE
values with short or long form lengths. The reader is shared by PKCS#1 key
parsing and the ECDSA signature conversion helpers.
"""

from typing import List

from ..exceptions import KeyParseError

TAG_INTEGER = 0x02
TAG_SEQUENCE = 0x30

# Long form lengths larger than this are rejected rather than allocated
MAX_LENGTH_OCTETS = 4


class DerReader:
    """
    Sequential reader over a DER byte string.

    Every read checks bounds and raises KeyParseError on truncated or
    unexpected input, so callers never see IndexError from offset arithmetic.
    """

    def __init__(self, data: bytes, offset: int = 0, end: int = None):
        self.data = bytes(data)
        self.offset = offset
        self.end = len(self.data) if end is None else end

    def at_end(self) -> bool:
        return self.offset >= self.end

    def remaining(self) -> int:
        return self.end - self.offset

    def _take(self, count: int) -> bytes:
        if count < 0 or self.offset + count > self.end:
            raise KeyParseError(
                "Unexpected end of DER data",
                {"offset": self.offset, "wanted": count, "available": self.remaining()}
            )
        chunk = self.data[self.offset:self.offset + count]
        self.offset += count
        return chunk

    def read_byte(self) -> int:
        return self._take(1)[0]

    def peek_tag(self) -> int:
        if self.at_end():
            raise KeyParseError("Unexpected end of DER data", {"offset": self.offset})
        return self.data[self.offset]

    def read_tag(self) -> int:
        return self.read_byte()

    def read_length(self) -> int:
        """Read a short form or long form DER length."""
        first = self.read_byte()
        if first < 0x80:
            return first

        octets = first & 0x7F
        if octets == 0 or octets > MAX_LENGTH_OCTETS:
            raise KeyParseError(
                f"Unsupported DER length encoding: 0x{first:02x}",
                {"offset": self.offset - 1}
            )
        return int.from_bytes(self._take(octets), 'big')

    def read_value(self, expected_tag: int) -> bytes:
        """Read one TLV and return its value bytes."""
        tag = self.read_tag()
        if tag != expected_tag:
            raise KeyParseError(
                f"Unexpected DER tag 0x{tag:02x}, expected 0x{expected_tag:02x}",
                {"offset": self.offset - 1}
            )
        length = self.read_length()
        return self._take(length)

    def enter_sequence(self) -> 'DerReader':
        """Read a SEQUENCE header and return a reader bounded to its contents."""
        tag = self.read_tag()
        if tag != TAG_SEQUENCE:
            raise KeyParseError(
                f"Expected DER SEQUENCE, found tag 0x{tag:02x}",
                {"offset": self.offset - 1}
            )
        length = self.read_length()
        start = self.offset
        self._take(length)
        return DerReader(self.data, start, start + length)

    def read_integer(self) -> bytes:
        """
        Read an INTEGER and return its magnitude bytes.

        Leading 0x00 sign-guard bytes are stripped. A single zero byte is
        kept so the value 0 stays representable.
        """
        value = self.read_value(TAG_INTEGER)
        if not value:
            raise KeyParseError("Empty DER INTEGER", {"offset": self.offset})
        if value[0] & 0x80:
            raise KeyParseError("Negative DER INTEGER not supported", {"offset": self.offset})
        stripped = value.lstrip(b'\x00')
        return stripped or b'\x00'

    def read_integer_value(self) -> int:
        return int.from_bytes(self.read_integer(), 'big')


def encode_length(length: int) -> bytes:
    """Encode a DER length, switching to long form above 127."""
    if length < 0:
        raise ValueError("DER length cannot be negative")
    if length < 0x80:
        return bytes([length])
    body = length.to_bytes((length.bit_length() + 7) // 8, 'big')
    return bytes([0x80 | len(body)]) + body


def encode_tlv(tag: int, value: bytes) -> bytes:
    return bytes([tag]) + encode_length(len(value)) + value


def encode_integer(value) -> bytes:
    """
    Encode a non-negative integer (int or big-endian bytes) as DER INTEGER.

    Leading zeros are removed and a 0x00 guard is prepended when the high
    bit of the first byte is set, since DER integers are two's complement.
    """
    if isinstance(value, int):
        if value < 0:
            raise ValueError("Only non-negative integers are supported")
        raw = value.to_bytes(max(1, (value.bit_length() + 7) // 8), 'big')
    else:
        raw = bytes(value).lstrip(b'\x00') or b'\x00'

    if raw[0] & 0x80:
        raw = b'\x00' + raw
    return encode_tlv(TAG_INTEGER, raw)


def encode_sequence(elements: List[bytes]) -> bytes:
    return encode_tlv(TAG_SEQUENCE, b''.join(elements))


def ecdsa_raw_to_der(raw_signature: bytes) -> bytes:
    """
    Convert a fixed-width ``r || s`` ECDSA signature to DER.

    Args:
        raw_signature: Concatenated big-endian r and s of equal width

    Returns:
        bytes: ``SEQUENCE { INTEGER r, INTEGER s }``
    """
    if not raw_signature or len(raw_signature) % 2:
        raise ValueError("Raw ECDSA signature must have an even, non-zero length")
    half = len(raw_signature) // 2
    r, s = raw_signature[:half], raw_signature[half:]
    return encode_sequence([encode_integer(r), encode_integer(s)])


def ecdsa_der_to_raw(der_signature: bytes, width: int) -> bytes:
    """
    Convert a DER ECDSA signature back to fixed-width ``r || s``.

    Args:
        der_signature: DER encoded signature
        width: Byte width of each of r and s (32 for P-256)

    Returns:
        bytes: r and s, each left-padded to ``width`` bytes
    """
    reader = DerReader(der_signature)
    sequence = reader.enter_sequence()
    r = sequence.read_integer()
    s = sequence.read_integer()
    if not sequence.at_end() or not reader.at_end():
        raise KeyParseError("Trailing data after ECDSA signature")
    if len(r) > width or len(s) > width:
        raise KeyParseError(
            "ECDSA signature component wider than curve size",
            {"width": width}
        )
    return r.rjust(width, b'\x00') + s.rjust(width, b'\x00')
