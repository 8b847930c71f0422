"""tranx2 - TranX-2 transponder loop protocol decoder and tooling."""

from .codec import (
    NOISE_PREFIX, PASSING_PREFIX, MAX_TRANSPONDER_ID, Passing,
    DecodeError, LengthError, FieldDecodeError, EncodeError, TransponderIdOverflow,
    decode_passing, decode_noise, encode_passing, encode_noise,
)
from .stream import LineReader, Reader, Writer
from .client import Client, CallbackHandler, Handler

__all__ = [
    "NOISE_PREFIX", "PASSING_PREFIX", "MAX_TRANSPONDER_ID", "Passing",
    "DecodeError", "LengthError", "FieldDecodeError", "EncodeError",
    "TransponderIdOverflow",
    "decode_passing", "decode_noise", "encode_passing", "encode_noise",
    "LineReader", "Reader", "Writer",
    "Client", "CallbackHandler", "Handler",
]
