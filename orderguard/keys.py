"""
Key management module for Order Guard.

Two kinds of key material exist:

- MasterKey: the single symmetric key that protects every stored order. It is
  created once at startup and handed to the OrderVault by reference.
- ClientKeyPair: an Ed25519 keypair held by a client. Only the verify key is
  ever given to the server.
"""

import json
import os
from dataclasses import dataclass, field
from typing import Optional, Union

import nacl.utils
from nacl.secret import SecretBox
from nacl.signing import SigningKey, VerifyKey

from . import config
from .errors import InvalidPublicKey
from .util import b64d, b64e


@dataclass(frozen=True)
class MasterKey:
    """
    Symmetric authenticated-encryption key (XSalsa20-Poly1305).

    Immutable; there is no way to replace the key bytes of an instance.
    """
    key: bytes = field(repr=False)
    kid: str = config.MASTER_KEY_KID

    def __post_init__(self):
        if not isinstance(self.key, bytes) or len(self.key) != SecretBox.KEY_SIZE:
            raise ValueError(f"master key must be {SecretBox.KEY_SIZE} bytes")

    @classmethod
    def generate(cls, kid: str = config.MASTER_KEY_KID) -> 'MasterKey':
        return cls(key=nacl.utils.random(SecretBox.KEY_SIZE), kid=kid)

    @classmethod
    def from_b64(cls, key_b64: str, kid: str = config.MASTER_KEY_KID) -> 'MasterKey':
        return cls(key=b64d(key_b64), kid=kid)

    def to_b64(self) -> str:
        return b64e(self.key)

    @classmethod
    def load(cls, path: str) -> 'MasterKey':
        """Load a key file written by `save`."""
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        return cls.from_b64(raw["key_b64"], kid=raw.get("kid", config.MASTER_KEY_KID))

    def save(self, path: str) -> None:
        """Write the key as JSON, readable only by the owner."""
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump({"kid": self.kid, "key_b64": self.to_b64()}, f, indent=2)

    def box(self) -> SecretBox:
        return SecretBox(self.key)


def load_master_key(path: Optional[str] = None) -> MasterKey:
    """
    Bootstrap the master key.

    Loads the configured key file when it exists, otherwise generates a fresh
    key that lives only as long as the process.
    """
    path = path or config.MASTER_KEY_PATH
    if path and os.path.exists(path):
        return MasterKey.load(path)
    return MasterKey.generate()


@dataclass
class ClientKeyPair:
    """Ed25519 key pair owned by a client."""
    signing_key: bytes = field(repr=False)
    verify_key: bytes
    algorithm: str = "Ed25519"

    @classmethod
    def generate(cls) -> 'ClientKeyPair':
        sk = SigningKey.generate()
        return cls(signing_key=bytes(sk), verify_key=bytes(sk.verify_key))

    @property
    def public_key(self) -> bytes:
        return self.verify_key

    def sign(self, data: bytes) -> bytes:
        """Sign data and return the detached 64-byte signature."""
        return SigningKey(self.signing_key).sign(data).signature


def coerce_verify_key(public_key: Union[bytes, str, VerifyKey]) -> VerifyKey:
    """
    Turn registration input into a VerifyKey.

    Accepts raw 32-byte keys, base64 strings and VerifyKey instances.
    """
    if isinstance(public_key, VerifyKey):
        return public_key
    try:
        if isinstance(public_key, str):
            public_key = b64d(public_key)
        if not isinstance(public_key, (bytes, bytearray)):
            raise InvalidPublicKey(f"unsupported key type: {type(public_key).__name__}")
        return VerifyKey(bytes(public_key))
    except InvalidPublicKey:
        raise
    except (ValueError, TypeError) as e:
        raise InvalidPublicKey(str(e)) from e
