"""
Utility functions for Order Guard.

Encoding helpers shared by the codec, key handling and logging.
"""

import base64
import binascii
import hashlib
from typing import Union


def b64e(b: bytes) -> str:
    """Base64 encode bytes to string."""
    return base64.b64encode(b).decode('ascii')


def b64d(s: str) -> bytes:
    """
    Strict base64 decode string to bytes.

    Raises ValueError on characters outside the base64 alphabet or bad padding.
    """
    try:
        return base64.b64decode(s.encode('ascii'), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValueError(f"invalid base64: {e}") from e


def to_bytes(data: Union[bytes, str]) -> bytes:
    """UTF-8 encode strings, pass bytes through."""
    if isinstance(data, str):
        return data.encode('utf-8')
    return bytes(data)


def fingerprint(data: Union[bytes, str], length: int = 16) -> str:
    """
    Short SHA-256 hex fingerprint.
    Useful for logging key material and payloads without revealing them.
    """
    return hashlib.sha256(to_bytes(data)).hexdigest()[:length]
