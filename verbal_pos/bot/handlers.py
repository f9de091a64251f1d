"""aiogram message handlers.

Every incoming text message is run through the same command interpreter as the HTTP API and answered
with exactly one plain-text reply rendered from the response envelope.
"""

from __future__ import annotations

import logging
from typing import Any

from aiogram.types import Message

from verbal_pos.app import App
from verbal_pos.inventory.envelope import ResponseEnvelope, ResponseType, help_envelope
from verbal_pos.inventory.interpreter import execute_command

logger = logging.getLogger(__name__)

_MAX_LISTED_ITEMS = 10


def _is_command_text(text: str) -> bool:
    return text.lstrip().startswith("/")


def _fmt(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _render_data(envelope: ResponseEnvelope) -> list[str]:
    data = envelope.data or {}
    if envelope.type == ResponseType.sale:
        sale, product = data["sale"], data["product"]
        return [
            f"{product['name']}: {_fmt(sale['quantity'])} sold for {_fmt(sale['totalPrice'])}",
            f"Remaining stock: {_fmt(product['remainingStock'])} {product['unit']}",
        ]
    if envelope.type in {ResponseType.product_create, ResponseType.product_update}:
        p = data["product"]
        return [
            f"{p['name']}: stock {_fmt(p['stockQuantity'])} {p['unit']}, "
            f"price {_fmt(p['pricePerUnit'])}, low at {_fmt(p['lowStockThreshold'])}"
        ]
    if envelope.type == ResponseType.summary:
        return [f"Sales: {data['count']}, earned: {_fmt(data['totalEarned'])}"]
    if envelope.type == ResponseType.low_stock:
        products = data["products"]
        if not products:
            return ["No products are low on stock."]
        return [
            f"- {p['name']}: {_fmt(p['stockQuantity'])} {p['unit']}"
            for p in products[:_MAX_LISTED_ITEMS]
        ]
    if envelope.type == ResponseType.stock:
        return [f"Available: {_fmt(data['available'])}, requested: {_fmt(data['requested'])}"]
    return []


def render_reply(envelope: ResponseEnvelope) -> str:
    """Render an envelope as a short plain-text Telegram reply."""

    lines = [envelope.message, *_render_data(envelope)]
    if envelope.examples:
        lines.extend(f"- {example}" for example in envelope.examples)
    return "\n".join(lines)


async def handle_message(message: Message, app: App) -> None:
    """Handle any incoming Telegram message and reply exactly once."""

    raw_text = message.text or message.caption or ""
    if _is_command_text(raw_text):
        # `/start`, `/help`, ...: show what the bot understands.
        await message.answer(render_reply(help_envelope()))
        return

    envelope = await execute_command(raw_text, app.executor)
    await message.answer(render_reply(envelope))
