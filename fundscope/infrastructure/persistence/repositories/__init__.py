"""Concrete SQLAlchemy repository implementations."""

from .cache import SqlTimedCache, decode_envelope, encode_envelope

__all__ = ["SqlTimedCache", "decode_envelope", "encode_envelope"]
