"""Uniform response envelope for every command outcome.

Every path through the interpreter, success or failure, produces exactly one `ResponseEnvelope`
with a discriminating `type` tag and the HTTP status that goes with it.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from verbal_pos.commands.dictionaries import HELP_EXAMPLES, HELP_MESSAGE
from verbal_pos.inventory.models import wire_number

SERVER_ERROR_MESSAGE = "Server error while executing command"


class ResponseType(StrEnum):
    """Envelope type tags (wire values)."""

    sale = "sale"
    product_create = "productCreate"
    product_update = "productUpdate"
    summary = "summary"
    low_stock = "lowStock"
    help = "help"
    validation = "validation"
    parse = "parse"
    not_found = "notFound"
    stock = "stock"
    server = "server"


STATUS_CODES: dict[ResponseType, int] = {
    ResponseType.sale: 201,
    ResponseType.product_create: 201,
    ResponseType.product_update: 200,
    ResponseType.summary: 200,
    ResponseType.low_stock: 200,
    ResponseType.help: 400,
    ResponseType.validation: 400,
    ResponseType.parse: 400,
    ResponseType.not_found: 404,
    ResponseType.stock: 400,
    ResponseType.server: 500,
}


class ResponseEnvelope(BaseModel):
    """`{success, type, message, data?, examples?}`."""

    model_config = ConfigDict(extra="forbid")

    success: bool
    type: ResponseType
    message: str
    data: dict[str, Any] | None = None
    examples: list[str] | None = None

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.type]

    def to_json(self) -> dict[str, Any]:
        """JSON-ready dict; absent optional members are omitted."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def success(type_: ResponseType, message: str, data: dict[str, Any]) -> ResponseEnvelope:
    return ResponseEnvelope(success=True, type=type_, message=message, data=data)


def failure(
        type_: ResponseType,
        message: str,
        *,
        data: dict[str, Any] | None = None,
        with_examples: bool = False,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        success=False,
        type=type_,
        message=message,
        data=data,
        examples=list(HELP_EXAMPLES) if with_examples else None,
    )


def help_envelope() -> ResponseEnvelope:
    """The universal fallback for text no recognizer accepts."""

    return failure(ResponseType.help, HELP_MESSAGE, with_examples=True)


def empty_input_envelope(message: str) -> ResponseEnvelope:
    return failure(ResponseType.validation, message, with_examples=True)


def parse_failure_envelope(usage: str) -> ResponseEnvelope:
    return failure(ResponseType.parse, usage, with_examples=True)


def validation_envelope(message: str) -> ResponseEnvelope:
    return failure(ResponseType.validation, message)


def not_found_envelope(name: str) -> ResponseEnvelope:
    return failure(ResponseType.not_found, f"Product not found for name: {name}")


def insufficient_stock_envelope(available: Decimal, requested: Decimal) -> ResponseEnvelope:
    return failure(
        ResponseType.stock,
        "Not enough stock for this product",
        data={"available": wire_number(available), "requested": wire_number(requested)},
    )


def server_error_envelope() -> ResponseEnvelope:
    return failure(ResponseType.server, SERVER_ERROR_MESSAGE)
