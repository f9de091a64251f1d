"""Text-command route: `POST /api/commands/execute`."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from verbal_pos.api.deps import get_app
from verbal_pos.app import App
from verbal_pos.inventory.interpreter import execute_command

router = APIRouter(prefix="/commands", tags=["commands"])


class CommandRequest(BaseModel):
    """Typed or speech-transcribed command text."""

    text: str | None = None


@router.post("/execute")
async def execute(
        app: Annotated[App, Depends(get_app)],
        body: CommandRequest | None = None,
) -> JSONResponse:
    envelope = await execute_command(body.text if body else None, app.executor)
    return JSONResponse(envelope.to_json(), status_code=envelope.status_code)
