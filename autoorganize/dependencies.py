from fastapi import Request

from .store import WorkshopStore


def get_store(request: Request) -> WorkshopStore:
    """The store created by create_app(); injected into every route."""
    return request.app.state.store
