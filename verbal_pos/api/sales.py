"""Sale routes.

`POST /api/sales` goes through the same atomic `record_sale` as the sell commands, so the total is
always computed server-side from the current product price.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from verbal_pos.api.deps import get_app
from verbal_pos.app import App
from verbal_pos.commands.dictionaries import MAX_AMOUNT
from verbal_pos.inventory.dates import local_today_bounds
from verbal_pos.inventory.executor import summarize_sales, to_wire
from verbal_pos.inventory.repository import InsufficientStockError, ProductNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sales", tags=["sales"])


class NewSaleRequest(BaseModel):
    """`{productId, quantity, customerName?}`; any client-sent total is ignored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    product_id: int
    quantity: Decimal = Field(gt=0, le=MAX_AMOUNT)
    customer_name: str | None = None


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_sale(
        body: NewSaleRequest,
        app: Annotated[App, Depends(get_app)],
) -> dict[str, Any]:
    try:
        recorded = await app.repository.record_sale(
            body.product_id,
            body.quantity,
            (body.customer_name or "").strip() or None,
        )
    except ProductNotFoundError as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Product not found") from exc
    except InsufficientStockError as exc:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            "Not enough stock for this product",
        ) from exc

    logger.info("sale recorded id=%s product_id=%s", recorded.sale.id, body.product_id)
    return {"message": "Sale recorded successfully", "sale": to_wire(recorded.sale)}


@router.get("/today")
async def today_sales(app: Annotated[App, Depends(get_app)]) -> dict[str, Any]:
    start, end = local_today_bounds(app.executor.clock(), app.settings.tz)
    return summarize_sales(await app.repository.find_sales_in_range(start, end))
