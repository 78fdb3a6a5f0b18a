"""
Server bootstrap.

Builds the registry, verifier, vault and router around one master key.
"""

import logging
from typing import Optional

from . import config
from .keys import MasterKey, load_master_key
from .logging_config import configure_logging
from .registry import IdentityRegistry
from .router import MessageRouter
from .vault import OrderVault
from .verifier import EnvelopeVerifier

logger = logging.getLogger(__name__)


def create_router(
    master_key: Optional[MasterKey] = None,
    ledger_capacity: int = config.LEDGER_CAPACITY,
) -> MessageRouter:
    """
    Wire up a complete server.

    Args:
        master_key: Storage key; loaded from ORDERGUARD_MASTER_KEY_PATH or
            generated when omitted
        ledger_capacity: Orders kept per client

    Returns:
        A MessageRouter ready to accept envelopes
    """
    if master_key is None:
        master_key = load_master_key()

    registry = IdentityRegistry(ledger_capacity=ledger_capacity)
    verifier = EnvelopeVerifier(registry)
    vault = OrderVault(master_key, registry)

    logger.info("Order server ready (master key %s, ledger capacity %d)",
                master_key.kid, ledger_capacity)
    return MessageRouter(registry, verifier, vault)


def bootstrap() -> MessageRouter:
    """Configure logging from the environment and build the router."""
    configure_logging(
        level="DEBUG" if config.is_debug() else config.LOG_LEVEL,
        json_format=config.LOG_JSON,
        log_file=config.LOG_FILE or None,
    )
    if not config.validate_config()["master_key"]:
        level = logging.WARNING if config.is_production() else logging.INFO
        logger.log(level, "No master key at %s; orders stored this run will not be readable after restart",
                   config.MASTER_KEY_PATH)
    return create_router()
