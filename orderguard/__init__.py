"""
Order Guard

Version: 0.1.0

Signed order intake with encrypted per-client storage.

A client registers its Ed25519 public key and receives an integer id. Every
later message is a signed envelope; the server verifies the signature against
the registered key before looking at the content, seals accepted buy/sell
orders under a single master key, and keeps the last 100 per client. The
owner can read back their own orders in plaintext with a signed GetOrders.

Usage:
    from orderguard import create_router, OrderClient

    router = create_router()
    client = OrderClient.register(router)

    client.buy("AAPL", "3")        # True
    client.get_orders()            # ['{"messageType":"BuyStock","stock":"AAPL","amount":"3"}']

    # Raw protocol
    response = router.accept_envelope(envelope_json)
"""

__version__ = "0.1.0"

from .errors import (
    OrderGuardError,
    MalformedEnvelope,
    MalformedMessage,
    UnknownClient,
    InvalidPublicKey,
    CryptoOperationFailure,
)
from .keys import MasterKey, ClientKeyPair, load_master_key
from .ledger import OrderLedger
from .registry import IdentityRegistry, ClientIdentity
from .verifier import EnvelopeVerifier
from .vault import OrderVault
from .messages import (
    SignedEnvelope,
    BuyStock,
    SellStock,
    GetOrders,
    ServerResponse,
    ServerSendOrders,
    FAILURE_RESPONSE,
    STORAGE_FAILURE_RESPONSE,
    NO_ORDERS_RESPONSE,
    create_buy_stock_message,
    create_sell_stock_message,
    create_get_orders_message,
    create_signed_envelope,
    parse_envelope,
    parse_message,
)
from .router import MessageRouter
from .server import create_router
from .client import OrderClient


__all__ = [
    "__version__",

    # Errors
    "OrderGuardError",
    "MalformedEnvelope",
    "MalformedMessage",
    "UnknownClient",
    "InvalidPublicKey",
    "CryptoOperationFailure",

    # Keys
    "MasterKey",
    "ClientKeyPair",
    "load_master_key",

    # Components
    "OrderLedger",
    "IdentityRegistry",
    "ClientIdentity",
    "EnvelopeVerifier",
    "OrderVault",
    "MessageRouter",
    "create_router",
    "OrderClient",

    # Codec
    "SignedEnvelope",
    "BuyStock",
    "SellStock",
    "GetOrders",
    "ServerResponse",
    "ServerSendOrders",
    "FAILURE_RESPONSE",
    "STORAGE_FAILURE_RESPONSE",
    "NO_ORDERS_RESPONSE",
    "create_buy_stock_message",
    "create_sell_stock_message",
    "create_get_orders_message",
    "create_signed_envelope",
    "parse_envelope",
    "parse_message",
]
