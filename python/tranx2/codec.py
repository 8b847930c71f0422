"""TranX-2 line codec: one protocol line <-> one typed record.

Wire format (ASCII, one message per line, terminated by "\\r\\n"):

  noise:    "#" NNNN
  passing:  "$" PPPP TTTTTT KKKKKKKK HH SS RR

  P prefix (u16), T transponder id (u24), K passing ticks (u32),
  H hits (u8), S strength (u8), R trailing (u8), N noise level (u16).

All fields are big-endian, two hex digits per byte, uppercase on output.
"""

from __future__ import annotations

import binascii
import struct
from dataclasses import dataclass

NOISE_PREFIX = b"#"
PASSING_PREFIX = b"$"
MAX_TRANSPONDER_ID = 0x00FFFFFF

# Line lengths exclude the "\r\n" terminator
PASSING_MSG_LENGTH = 25
NOISE_MSG_LENGTH = 5

LINE_TERMINATOR = b"\r\n"

# (name, start, end) in decode order; offsets into the trimmed line
PASSING_FIELDS = (
    ("prefix", 1, 5),
    ("transponder_id", 5, 11),
    ("passing_ticks", 11, 19),
    ("hits", 19, 21),
    ("strength", 21, 23),
    ("trailing", 23, 25),
)

_FIELD_BITS = {
    "prefix": 16,
    "transponder_id": 32,
    "passing_ticks": 32,
    "hits": 8,
    "strength": 8,
    "trailing": 8,
}


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class DecodeError(ValueError):
    """A single protocol line could not be decoded."""

    def __init__(self, line: bytes, detail: str):
        super().__init__(f"could not decode message {line!r}: {detail}")
        self.line = line
        self.detail = detail


class LengthError(DecodeError):
    """Trimmed line length does not match the message kind."""

    def __init__(self, line: bytes, expected: int):
        super().__init__(line, f"message length {len(line)}, expected {expected}")
        self.length = len(line)
        self.expected = expected


class FieldDecodeError(DecodeError):
    """A field's hex text is not valid hex."""

    def __init__(self, line: bytes, field: str, cause: Exception):
        super().__init__(line, f"failed to parse {field.replace('_', ' ')}: {cause}")
        self.field = field
        self.cause = cause


class EncodeError(ValueError):
    """A record cannot be represented on the wire."""


class TransponderIdOverflow(EncodeError):
    def __init__(self, transponder_id: int):
        super().__init__(
            f"transponder id overflow: {transponder_id:#x} > {MAX_TRANSPONDER_ID:#x}"
        )
        self.transponder_id = transponder_id


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Passing:
    """One transponder crossing the loop.

    transponder_id is a 24-bit value on the wire but is held in a 32-bit
    range; encoding anything above MAX_TRANSPONDER_ID raises
    TransponderIdOverflow.  prefix and trailing are carried as-is, their
    meaning is not documented by the device.
    """

    transponder_id: int
    passing_ticks: int  # milliseconds since the device was started
    hits: int           # loop reads while the transponder passed
    strength: int
    prefix: int = 0
    trailing: int = 0

    def __post_init__(self):
        for name, bits in _FIELD_BITS.items():
            value = getattr(self, name)
            if not 0 <= value < (1 << bits):
                raise ValueError(f"{name} out of range for u{bits}: {value}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _trim(line: bytes) -> bytes:
    return bytes(line).strip(b"\r\n")


def _hex_field(line: bytes, field: str, start: int, end: int) -> int:
    try:
        raw = binascii.unhexlify(line[start:end])
    except binascii.Error as exc:
        raise FieldDecodeError(line, field, exc) from exc
    return int.from_bytes(raw, "big")


# ---------------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------------

def decode_passing(line: bytes) -> Passing:
    """Decode a passing line, with or without surrounding "\\r\\n".

    Fields are checked left to right, so the first corrupt field is the
    one reported.
    """
    msg = _trim(line)
    if len(msg) != PASSING_MSG_LENGTH:
        raise LengthError(msg, PASSING_MSG_LENGTH)

    values = {
        name: _hex_field(msg, name, start, end)
        for name, start, end in PASSING_FIELDS
    }
    return Passing(**values)


def decode_noise(line: bytes) -> int:
    """Decode a noise line into its 16-bit level."""
    msg = _trim(line)
    if len(msg) != NOISE_MSG_LENGTH:
        raise LengthError(msg, NOISE_MSG_LENGTH)
    return _hex_field(msg, "noise_level", 1, NOISE_MSG_LENGTH)


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------

def encode_passing(rec: Passing) -> bytes:
    """Encode a passing as a terminated protocol line."""
    if rec.transponder_id > MAX_TRANSPONDER_ID:
        raise TransponderIdOverflow(rec.transponder_id)

    body = (
        struct.pack(">H", rec.prefix)
        + rec.transponder_id.to_bytes(3, "big")
        + struct.pack(">IBBB", rec.passing_ticks, rec.hits,
                      rec.strength, rec.trailing)
    )
    return PASSING_PREFIX + body.hex().upper().encode("ascii") + LINE_TERMINATOR


def encode_noise(noise: int) -> bytes:
    """Encode a 16-bit noise level as a terminated protocol line."""
    if not 0 <= noise <= 0xFFFF:
        raise ValueError(f"noise level out of range for u16: {noise}")
    return NOISE_PREFIX + struct.pack(">H", noise).hex().upper().encode("ascii") + LINE_TERMINATOR
