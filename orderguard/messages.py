"""
Wire codec for Order Guard.

Pydantic models for the signed envelope, the inner order messages and the
server's responses. Field names are snake_case in Python and camelCase on the
wire:

    envelope:   {"clientId": 0, "content": "<inner message JSON>", "signature": "<base64>"}
    buy/sell:   {"messageType": "BuyStock", "stock": "AAPL", "amount": "3"}
    retrieval:  {"messageType": "GetOrders"}
    ack:        {"messageType": "ServerResponse", "success": true}
    order:      {"messageType": "ServerSendOrders", "order": "<original content>"}

Inner messages form a tagged union on messageType.
"""

import json
import re
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .config import RECORD_DELIMITER
from .errors import MalformedEnvelope, MalformedMessage
from .util import b64d, b64e


AMOUNT_PATTERN = re.compile(r'^[0-9]{1,18}$')

# Fixed markers. Not produced by any model so they cannot collide with one.
FAILURE_RESPONSE = json.dumps({"messageType": "Failure"}, separators=(',', ':'))
STORAGE_FAILURE_RESPONSE = json.dumps({"messageType": "StorageFailure"}, separators=(',', ':'))
NO_ORDERS_RESPONSE = json.dumps({"messageType": "NoOrders"}, separators=(',', ':'))


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    def to_wire(self) -> str:
        return self.model_dump_json(by_alias=True)


# ============================================================
# Inner messages
# ============================================================

def _amount_is_numeric(v):
    if isinstance(v, int) and not isinstance(v, bool):
        v = str(v)
    if not isinstance(v, str) or not AMOUNT_PATTERN.match(v):
        raise ValueError("amount must be a non-negative integer string")
    return v


Stock = Annotated[str, Field(min_length=1, max_length=64)]
Amount = Annotated[str, BeforeValidator(_amount_is_numeric)]


class BuyStock(WireModel):
    message_type: Literal["BuyStock"] = "BuyStock"
    stock: Stock
    amount: Amount


class SellStock(WireModel):
    message_type: Literal["SellStock"] = "SellStock"
    stock: Stock
    amount: Amount


class GetOrders(WireModel):
    message_type: Literal["GetOrders"] = "GetOrders"


class ServerResponse(WireModel):
    message_type: Literal["ServerResponse"] = "ServerResponse"
    success: bool


class ServerSendOrders(WireModel):
    message_type: Literal["ServerSendOrders"] = "ServerSendOrders"
    order: Optional[str]


Message = Annotated[
    Union[BuyStock, SellStock, GetOrders, ServerResponse, ServerSendOrders],
    Field(discriminator="message_type"),
]

_message_adapter: TypeAdapter = TypeAdapter(Message)


# ============================================================
# Envelope
# ============================================================

class SignedEnvelope(WireModel):
    client_id: Annotated[int, Field(strict=True, ge=0)]
    content: str
    signature: str

    @field_validator("signature")
    @classmethod
    def _signature_is_base64(cls, v: str) -> str:
        b64d(v)
        return v

    @property
    def signature_bytes(self) -> bytes:
        return b64d(self.signature)

    @property
    def payload(self) -> bytes:
        """The exact bytes covered by the signature."""
        return self.content.encode("utf-8")


# ============================================================
# Builders
# ============================================================

def create_buy_stock_message(stock: str, amount: Union[str, int]) -> str:
    return BuyStock(stock=stock, amount=amount).to_wire()


def create_sell_stock_message(stock: str, amount: Union[str, int]) -> str:
    return SellStock(stock=stock, amount=amount).to_wire()


def create_get_orders_message() -> str:
    return GetOrders().to_wire()


def create_server_response_message(success: bool) -> str:
    return ServerResponse(success=success).to_wire()


def create_server_send_orders_message(order: Optional[str]) -> str:
    return ServerSendOrders(order=order).to_wire()


def create_signed_envelope(client_id: int, content: str, signature: bytes) -> str:
    return SignedEnvelope(client_id=client_id, content=content, signature=b64e(signature)).to_wire()


# ============================================================
# Parsers
# ============================================================

def parse_envelope(raw: Union[str, bytes]) -> SignedEnvelope:
    """
    Decode the outer envelope.

    Raises:
        MalformedEnvelope: On invalid JSON, missing fields or bad base64
    """
    try:
        return SignedEnvelope.model_validate_json(raw)
    except ValidationError as e:
        raise MalformedEnvelope(_summarize(e)) from e


def parse_message(content: Union[str, bytes]):
    """
    Decode an inner message into its tagged model.

    Raises:
        MalformedMessage: On invalid JSON, unknown messageType or bad fields
    """
    try:
        return _message_adapter.validate_json(content)
    except ValidationError as e:
        raise MalformedMessage(_summarize(e)) from e


def parse_acknowledgement(raw: str) -> bool:
    """True only for a ServerResponse carrying success=true."""
    try:
        msg = parse_message(raw)
    except MalformedMessage:
        return False
    return isinstance(msg, ServerResponse) and msg.success


def parse_orders_response(raw: str) -> List[Optional[str]]:
    """
    Split a GetOrders response into order payloads.

    Returns an empty list for NO_ORDERS_RESPONSE.

    Raises:
        MalformedMessage: If any fragment is not a ServerSendOrders message
    """
    if raw == NO_ORDERS_RESPONSE:
        return []
    orders: List[Optional[str]] = []
    for line in raw.split(RECORD_DELIMITER):
        if not line:
            continue
        msg = parse_message(line)
        if not isinstance(msg, ServerSendOrders):
            raise MalformedMessage(f"unexpected fragment type {msg.message_type}")
        orders.append(msg.order)
    return orders


def _summarize(e: ValidationError) -> str:
    errs = e.errors()
    if not errs:
        return "validation failed"
    first = errs[0]
    loc = ".".join(str(p) for p in first.get("loc", ()))
    return f"{loc}: {first.get('msg', 'invalid')}" if loc else first.get("msg", "invalid")
