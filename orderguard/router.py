"""
Message router: the server's single entry point.

A request moves through

    Received -> Parsed -> Verified -> Routed -> Responded

and may leave early from any state. Authentication always happens before the
inner message is even decoded, so nothing an unauthenticated sender writes
can reach the vault.
"""

import logging
from typing import List, Optional, Union

from nacl.signing import VerifyKey

from .config import RECORD_DELIMITER
from .errors import MalformedEnvelope, MalformedMessage
from .logging_config import audit_log, set_request_id
from .messages import (
    FAILURE_RESPONSE,
    NO_ORDERS_RESPONSE,
    STORAGE_FAILURE_RESPONSE,
    BuyStock,
    GetOrders,
    SellStock,
    SignedEnvelope,
    create_server_response_message,
    create_server_send_orders_message,
    parse_envelope,
    parse_message,
)
from .registry import IdentityRegistry
from .vault import OrderVault
from .verifier import EnvelopeVerifier

logger = logging.getLogger(__name__)


class MessageRouter:
    """
    Authenticates envelopes and dispatches them to the vault.

    Holds no per-request state; everything durable lives in the registry
    and the vault.
    """

    def __init__(
        self,
        registry: IdentityRegistry,
        verifier: EnvelopeVerifier,
        vault: OrderVault,
    ):
        self.registry = registry
        self.verifier = verifier
        self.vault = vault

    def register_client(self, public_key: Union[bytes, str, VerifyKey]) -> int:
        """Register a client's public key; see IdentityRegistry.register."""
        return self.registry.register(public_key)

    def accept_envelope(self, raw: Union[str, bytes], request_id: Optional[str] = None) -> str:
        """
        Process one signed envelope and return the response payload.

        Never raises for bad input: malformed envelopes, bad signatures and
        storage failures all come back as response payloads.
        """
        set_request_id(request_id)

        # Parsed
        try:
            envelope = parse_envelope(raw)
        except MalformedEnvelope as e:
            audit_log.envelope_malformed("envelope", e.message)
            return FAILURE_RESPONSE

        # Verified
        if not self.verifier.verify(envelope.client_id, envelope.payload, envelope.signature_bytes):
            return create_server_response_message(False)

        # Routed
        try:
            message = parse_message(envelope.content)
        except MalformedMessage as e:
            audit_log.envelope_malformed("message", e.message)
            return FAILURE_RESPONSE

        if isinstance(message, (BuyStock, SellStock)):
            return self._store(envelope)
        if isinstance(message, GetOrders):
            return self._get_orders(envelope.client_id)

        logger.debug("Unroutable message type %s from client %s",
                     message.message_type, envelope.client_id)
        return FAILURE_RESPONSE

    def _store(self, envelope: SignedEnvelope) -> str:
        # the verified content bytes are what gets sealed
        if self.vault.store(envelope.client_id, envelope.payload):
            return create_server_response_message(True)
        return STORAGE_FAILURE_RESPONSE

    def _get_orders(self, client_id: int) -> str:
        orders: List[Optional[str]] = self.vault.retrieve_all(client_id)
        if not orders:
            return NO_ORDERS_RESPONSE
        return RECORD_DELIMITER.join(
            create_server_send_orders_message(order) for order in orders
        )
