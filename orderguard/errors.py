"""
Exception taxonomy for Order Guard.

Every error raised inside the pipeline derives from OrderGuardError so the
router can degrade any failure into a well-formed response. An invalid
signature is not an exception: it is a normal negative outcome.
"""


class OrderGuardError(Exception):
    """Base class for all Order Guard errors."""


class MalformedEnvelope(OrderGuardError):
    """Raised when the outer signed envelope cannot be decoded."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"malformed envelope: {message}")


class MalformedMessage(OrderGuardError):
    """Raised when the inner order message cannot be decoded."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"malformed message: {message}")


class UnknownClient(OrderGuardError, LookupError):
    """Raised when a client id has never been registered."""

    def __init__(self, client_id):
        self.client_id = client_id
        super().__init__(f"unknown client: {client_id}")


class InvalidPublicKey(OrderGuardError, ValueError):
    """Raised when registration is attempted with unusable key material."""


class CryptoOperationFailure(OrderGuardError):
    """Raised when the encryption or decryption primitive fails."""
