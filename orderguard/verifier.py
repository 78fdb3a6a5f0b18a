"""
Envelope verifier.

Checks that an envelope's payload was signed by the private key matching the
public key registered for the claimed client id. Every failure path reduces
to False: an unknown client, a signature of the wrong length and a tampered
payload all look the same to the caller.
"""

from nacl.exceptions import BadSignatureError, CryptoError

from .errors import UnknownClient
from .logging_config import audit_log
from .registry import IdentityRegistry


class EnvelopeVerifier:
    """Ed25519 signature check bound to an IdentityRegistry."""

    def __init__(self, registry: IdentityRegistry):
        self._registry = registry

    def verify(self, client_id: int, payload: bytes, signature: bytes) -> bool:
        """
        Verify a detached signature over payload.

        Args:
            client_id: Claimed sender
            payload: The exact bytes that were signed
            signature: Detached Ed25519 signature

        Returns:
            True if the signature is valid for the registered key, False otherwise
        """
        try:
            verify_key = self._registry.lookup(client_id)
        except UnknownClient:
            audit_log.signature_rejected(client_id, "UNKNOWN_CLIENT")
            return False

        try:
            verify_key.verify(payload, signature)
            return True
        except BadSignatureError:
            audit_log.signature_rejected(client_id, "BAD_SIGNATURE")
            return False
        except (CryptoError, ValueError, TypeError):
            audit_log.signature_rejected(client_id, "MALFORMED_SIGNATURE")
            return False
