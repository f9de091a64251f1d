"""Product CRUD routes."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status

from verbal_pos.api.deps import get_app
from verbal_pos.app import App
from verbal_pos.inventory.executor import to_wire
from verbal_pos.inventory.models import NewProduct

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
        body: NewProduct,
        app: Annotated[App, Depends(get_app)],
) -> dict[str, Any]:
    product = await app.repository.create_product(body)
    logger.info("product created id=%s name=%s", product.id, product.name)
    return {"message": "Product created successfully", "product": to_wire(product)}


@router.get("")
async def list_products(app: Annotated[App, Depends(get_app)]) -> list[dict[str, Any]]:
    return [to_wire(p) for p in await app.repository.list_products()]


@router.get("/low-stock")
async def low_stock_products(app: Annotated[App, Depends(get_app)]) -> list[dict[str, Any]]:
    return [to_wire(p) for p in await app.repository.find_low_stock_products()]
