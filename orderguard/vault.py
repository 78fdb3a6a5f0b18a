"""
Order vault.

Encrypts accepted orders under the master key and keeps the ciphertext in
each client's bounded ledger. Plaintext only exists transiently, on the way
in and on the way back out to the owning client.
"""

from typing import List, Optional, Union

from nacl.exceptions import CryptoError

from .errors import CryptoOperationFailure, UnknownClient
from .keys import MasterKey
from .logging_config import audit_log
from .registry import IdentityRegistry
from .util import to_bytes


class OrderVault:
    """
    Authenticated encryption (XSalsa20-Poly1305) over per-client ledgers.

    The master key is injected at construction and never changes. Ledgers are
    allocated by the registry; the vault is the only writer.
    """

    def __init__(self, master_key: MasterKey, registry: IdentityRegistry):
        self._master_key = master_key
        self._box = master_key.box()
        self._registry = registry

    @property
    def key_id(self) -> str:
        return self._master_key.kid

    # ============================================================
    # Primitive
    # ============================================================

    def encrypt(self, plaintext: Union[bytes, str]) -> bytes:
        """
        Encrypt with a fresh random nonce, no associated data.

        Returns:
            nonce || ciphertext || tag

        Raises:
            CryptoOperationFailure: If the primitive fails
        """
        try:
            return bytes(self._box.encrypt(to_bytes(plaintext)))
        except (CryptoError, TypeError, ValueError) as e:
            raise CryptoOperationFailure(f"encrypt: {e}") from e

    def decrypt(self, blob: bytes) -> bytes:
        """
        Decrypt and authenticate a blob produced by `encrypt`.

        Raises:
            CryptoOperationFailure: If the blob was tampered with, truncated,
                or sealed under a different key
        """
        try:
            return self._box.decrypt(blob)
        except (CryptoError, TypeError, ValueError) as e:
            raise CryptoOperationFailure(f"decrypt: {e}") from e

    # ============================================================
    # Ledger operations
    # ============================================================

    def store(self, client_id: int, plaintext: Union[bytes, str]) -> bool:
        """
        Encrypt an order and append it to the client's ledger.

        Returns:
            True if appended; False if the client is unknown or encryption failed
        """
        try:
            ledger = self._registry.ledger(client_id)
        except UnknownClient:
            return False

        try:
            blob = self.encrypt(plaintext)
        except CryptoOperationFailure as e:
            audit_log.crypto_failure("encrypt", client_id, str(e))
            return False

        evicted = ledger.append(blob)
        audit_log.order_stored(client_id, len(ledger), evicted is not None)
        return True

    def retrieve_all(self, client_id: int) -> List[Optional[str]]:
        """
        Decrypt a client's ledger, oldest first.

        An entry that fails to decrypt comes back as None; the rest are still
        returned. An empty ledger, or an unknown client, yields an empty list.
        """
        try:
            ledger = self._registry.ledger(client_id)
        except UnknownClient:
            return []

        orders: List[Optional[str]] = []
        failed = 0
        for blob in ledger.snapshot():
            try:
                orders.append(self.decrypt(blob).decode("utf-8"))
            except (CryptoOperationFailure, UnicodeDecodeError) as e:
                failed += 1
                audit_log.crypto_failure("decrypt", client_id, str(e))
                orders.append(None)

        audit_log.orders_retrieved(client_id, len(orders), failed)
        return orders
