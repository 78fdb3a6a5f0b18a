"""
Configuration module for Order Guard.

Centralizes configuration with environment variable support and validation.
"""

import os
from pathlib import Path
from typing import Dict

# ============================================================
# Environment Configuration
# ============================================================

ENV = os.getenv("ORDERGUARD_ENV", "dev")  # dev|stage|prod

# Logging
LOG_LEVEL = os.getenv("ORDERGUARD_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("ORDERGUARD_LOG_JSON", "1").lower() in ("1", "true", "yes")
LOG_FILE = os.getenv("ORDERGUARD_LOG_FILE", "")

# Master storage key. Generated at startup when the file does not exist.
MASTER_KEY_PATH = os.getenv("ORDERGUARD_MASTER_KEY_PATH", "secrets/orderguard_master_key.json")
MASTER_KEY_KID = os.getenv("ORDERGUARD_MASTER_KEY_KID", "orderguard-master-01")

# Per-client ledger size. Not configurable: the eviction contract depends on it.
LEDGER_CAPACITY = 100

# Separator between fragments of a GetOrders response
RECORD_DELIMITER = "\n"


# ============================================================
# Validation
# ============================================================

def validate_config() -> Dict[str, bool]:
    """
    Check that optional configuration files exist.
    Returns dict of name -> exists.
    """
    paths = {
        "master_key": MASTER_KEY_PATH,
    }
    if LOG_FILE:
        paths["log_dir"] = str(Path(LOG_FILE).parent)

    return {name: Path(path).exists() for name, path in paths.items()}


# ============================================================
# Feature Flags
# ============================================================

def is_production() -> bool:
    """Check if running in production mode."""
    return ENV == "prod"


def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("ORDERGUARD_DEBUG", "").lower() in ("1", "true", "yes")
