"""FastAPI dependencies shared by the route modules."""

from __future__ import annotations

from fastapi import Request

from verbal_pos.app import App


def get_app(request: Request) -> App:
    """Return the application container attached to the FastAPI instance at startup."""

    return request.app.state.container
