"""
Identity registry.

Binds each client's Ed25519 public key to a stable integer id and allocates
the client's order ledger. Ids are handed out in first-registration order
starting at 0 and are never reused or reassigned.
"""

import threading
from dataclasses import dataclass
from typing import Dict, List, Union

from nacl.signing import VerifyKey

from .config import LEDGER_CAPACITY
from .errors import UnknownClient
from .keys import coerce_verify_key
from .ledger import OrderLedger
from .logging_config import audit_log
from .util import fingerprint


@dataclass(frozen=True)
class ClientIdentity:
    """A registered client."""
    id: int
    public_key: bytes

    @property
    def verify_key(self) -> VerifyKey:
        return VerifyKey(self.public_key)


@dataclass(frozen=True)
class _Slot:
    identity: ClientIdentity
    ledger: OrderLedger


class IdentityRegistry:
    """
    Growable table of client slots indexed by client id.

    One lock guards structural growth. Each slot's ledger carries its own
    lock, so lookups and ledger traffic never take the registry lock.
    """

    def __init__(self, ledger_capacity: int = LEDGER_CAPACITY):
        self._ledger_capacity = ledger_capacity
        self._slots: List[_Slot] = []
        self._ids_by_key: Dict[bytes, int] = {}
        self._lock = threading.Lock()

    def register(self, public_key: Union[bytes, str, VerifyKey]) -> int:
        """
        Register a public key and return its client id.

        Registering a key that is already known returns the existing id and
        changes nothing.

        Raises:
            InvalidPublicKey: If the key material is not a usable Ed25519 key
        """
        key_bytes = bytes(coerce_verify_key(public_key))

        with self._lock:
            existing = self._ids_by_key.get(key_bytes)
            if existing is not None:
                new = False
                client_id = existing
            else:
                new = True
                client_id = len(self._slots)
                self._slots.append(_Slot(
                    identity=ClientIdentity(id=client_id, public_key=key_bytes),
                    ledger=OrderLedger(self._ledger_capacity),
                ))
                self._ids_by_key[key_bytes] = client_id

        audit_log.client_registered(client_id, fingerprint(key_bytes), new)
        return client_id

    def _slot(self, client_id: int) -> _Slot:
        # list.append publishes a fully built slot; reads need no lock
        if not isinstance(client_id, int) or isinstance(client_id, bool) or client_id < 0:
            raise UnknownClient(client_id)
        try:
            return self._slots[client_id]
        except IndexError:
            raise UnknownClient(client_id) from None

    def lookup(self, client_id: int) -> VerifyKey:
        """
        Get the verify key registered for a client.

        Raises:
            UnknownClient: If the id has never been registered
        """
        return self._slot(client_id).identity.verify_key

    def ledger(self, client_id: int) -> OrderLedger:
        """
        Get the ledger allocated for a client.

        Raises:
            UnknownClient: If the id has never been registered
        """
        return self._slot(client_id).ledger

    def identities(self) -> List[ClientIdentity]:
        """Snapshot of all registered identities, ordered by id."""
        with self._lock:
            return [slot.identity for slot in self._slots]

    def __contains__(self, client_id: object) -> bool:
        try:
            self._slot(client_id)  # type: ignore[arg-type]
            return True
        except UnknownClient:
            return False

    def __len__(self) -> int:
        return len(self._slots)
