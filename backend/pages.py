"""Creation view and entries view, rendered with Jinja2."""

from datetime import datetime
from pathlib import Path
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from confirmation import DeleteConfirmation, DeleteState
from dependencies import get_confirmation, get_store
from derive import ALL, available_categories, emoji_for, monthly_counts, visible_entries
from schemas import CATEGORIES
from store import EntryStore, InvalidEntry
from timeconv import now_input_value, utc_to_local

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
templates.env.filters["emoji"] = emoji_for

router = APIRouter()


def _entries_url(order: str, category: str, **extra) -> str:
    params = {"order": order, "category": category, **extra}
    return "/entries?" + urlencode(params)


def _form_page(request: Request, store: EntryStore, values=None, errors=None, notice=None, saved=False):
    values = values or {
        "category": CATEGORIES[0],
        "description": "",
        "time": now_input_value(store.tz),
    }
    return templates.TemplateResponse(request, "index.html", {
        "categories": CATEGORIES,
        "values": values,
        "errors": errors or {},
        "notice": notice,
        "saved": saved,
    })


@router.get("/")
def new_entry(request: Request, saved: bool = False, store: EntryStore = Depends(get_store)):
    return _form_page(request, store, saved=saved)


@router.post("/")
def create_entry(
    request: Request,
    category: str = Form(""),
    description: str = Form(""),
    time: str = Form(""),
    store: EntryStore = Depends(get_store),
):
    values = {"category": category, "description": description, "time": time}
    try:
        entry = store.insert(category, description, time)
    except InvalidEntry as e:
        return _form_page(request, store, values=values, errors=e.errors)
    if entry is None:
        return _form_page(request, store, values=values, notice=store.last_error)
    return RedirectResponse("/?saved=1", status_code=303)


@router.get("/entries")
def list_entries(
    request: Request,
    order: str = Query("desc"),
    category: str = Query(ALL),
    error: str = Query(""),
    store: EntryStore = Depends(get_store),
    confirmation: DeleteConfirmation = Depends(get_confirmation),
):
    if order not in ("asc", "desc"):
        order = "desc"
    loaded = store.load(order == "asc")
    notice = None
    if not loaded:
        notice = store.last_error
    elif error == "delete":
        notice = "Could not delete the entry."

    entries = store.entries
    tz = store.tz
    pending = store.get(confirmation.pending_id) if confirmation.pending_id is not None else None
    return templates.TemplateResponse(request, "entries.html", {
        "entries": [(e, utc_to_local(e.time, tz)) for e in visible_entries(entries, category)],
        "categories": available_categories(entries),
        "counts": monthly_counts(entries, datetime.now(tz)),
        "order": order,
        "category": category,
        "all": ALL,
        "notice": notice,
        "pending": pending,
        "pending_id": confirmation.pending_id,
        "busy": confirmation.busy,
    })


@router.post("/entries/{entry_id}/delete")
def request_delete(
    entry_id: int,
    order: str = Form("desc"),
    category: str = Form(ALL),
    confirmation: DeleteConfirmation = Depends(get_confirmation),
):
    confirmation.request(entry_id)
    return RedirectResponse(_entries_url(order, category), status_code=303)


@router.post("/entries/delete/confirm")
def confirm_delete(
    order: str = Form("desc"),
    category: str = Form(ALL),
    confirmation: DeleteConfirmation = Depends(get_confirmation),
):
    attempted = confirmation.state == DeleteState.PENDING
    if confirmation.confirm() or not attempted:
        return RedirectResponse(_entries_url(order, category), status_code=303)
    return RedirectResponse(_entries_url(order, category, error="delete"), status_code=303)


@router.post("/entries/delete/cancel")
def cancel_delete(
    order: str = Form("desc"),
    category: str = Form(ALL),
    confirmation: DeleteConfirmation = Depends(get_confirmation),
):
    confirmation.cancel()
    return RedirectResponse(_entries_url(order, category), status_code=303)
