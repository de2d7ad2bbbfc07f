from fastapi import Request

from confirmation import DeleteConfirmation
from store import EntryStore


def get_store(request: Request) -> EntryStore:
    return request.app.state.store


def get_confirmation(request: Request) -> DeleteConfirmation:
    return request.app.state.confirmation
