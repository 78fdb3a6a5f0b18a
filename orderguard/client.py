"""
Order client.

Holds an Ed25519 keypair, registers its public key with a router and sends
signed buy, sell and retrieval messages.
"""

import logging
from typing import List, Optional

from .keys import ClientKeyPair
from .messages import (
    create_buy_stock_message,
    create_get_orders_message,
    create_sell_stock_message,
    create_signed_envelope,
    parse_acknowledgement,
    parse_orders_response,
)
from .router import MessageRouter
from .util import fingerprint

logger = logging.getLogger(__name__)


class OrderClient:
    """A registered client talking to a MessageRouter in process."""

    def __init__(self, client_id: int, key_pair: ClientKeyPair, router: MessageRouter):
        self.client_id = client_id
        self.key_pair = key_pair
        self.router = router

    @classmethod
    def register(cls, router: MessageRouter, key_pair: Optional[ClientKeyPair] = None) -> 'OrderClient':
        """Generate (or reuse) a keypair and register its public key."""
        key_pair = key_pair or ClientKeyPair.generate()
        client_id = router.register_client(key_pair.public_key)
        return cls(client_id, key_pair, router)

    def sign(self, message: str) -> bytes:
        return self.key_pair.sign(message.encode("utf-8"))

    def send(self, message: str) -> str:
        """Sign a message, wrap it in an envelope and submit it."""
        envelope = create_signed_envelope(self.client_id, message, self.sign(message))
        logger.debug("client %d sending message %s", self.client_id, fingerprint(message))
        response = self.router.accept_envelope(envelope)
        logger.debug("client %d received %d-byte response", self.client_id, len(response))
        return response

    def buy(self, stock: str, amount) -> bool:
        return parse_acknowledgement(self.send(create_buy_stock_message(stock, amount)))

    def sell(self, stock: str, amount) -> bool:
        return parse_acknowledgement(self.send(create_sell_stock_message(stock, amount)))

    def get_orders(self) -> List[Optional[str]]:
        """
        Fetch this client's stored orders, oldest first.

        Each entry is the exact message content that was signed, or None for
        an entry the server could not decrypt.

        Raises:
            MalformedMessage: If the server answered with anything other than
                orders (e.g. a rejected signature)
        """
        return parse_orders_response(self.send(create_get_orders_message()))
