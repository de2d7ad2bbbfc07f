import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse

from confirmation import DeleteConfirmation
from database import DATABASE_NAME, CollaboratorError, MoodTable, NotFound
from dependencies import get_store
from derive import ALL, available_categories, emoji_for, monthly_counts, visible_entries
from pages import router as pages_router
from schemas import CATEGORIES, CreateMoodEntry, MonthlySummary, MoodEntry
from store import EntryStore, InvalidEntry
from timeconv import utc_iso

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "store", None) is None:
        app.state.store = EntryStore(MoodTable())
    if getattr(app.state, "confirmation", None) is None:
        app.state.confirmation = DeleteConfirmation(app.state.store)
    logger.info("Mood journal started (database %s)", DATABASE_NAME)
    yield
    app.state.store.close()
    logger.info("Mood journal stopped")


app = FastAPI(title="Mood Journal", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(pages_router)


def _csv_text(value: str) -> str:
    return value.replace("\n", " ").replace('"', "''")


def _ascending(order: str) -> bool:
    if order not in ("asc", "desc"):
        raise HTTPException(status_code=400, detail="order must be 'asc' or 'desc'")
    return order == "asc"


@app.get("/test")
def test_database(store: EntryStore = Depends(get_store)):
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
        "collections": [],
    }
    try:
        response["collections"] = store.table.ping()[:10]
        response["database"] = "✅ Connected & Working"
    except CollaboratorError as e:
        response["database"] = f"❌ Error: {str(e)[:50]}"
    return response


# -------- Mood Journal Endpoints --------

@app.get("/api/categories")
def list_categories():
    return {"items": [{"name": c, "emoji": emoji_for(c)} for c in CATEGORIES]}


@app.get("/api/moods")
def list_moods(
    order: str = Query("desc"),
    category: str = Query(ALL),
    store: EntryStore = Depends(get_store),
):
    if not store.load(_ascending(order)):
        raise HTTPException(status_code=502, detail=store.last_error)
    entries = store.entries
    return {
        "items": [e.model_dump(mode="json") for e in visible_entries(entries, category)],
        "categories": available_categories(entries),
    }


@app.post("/api/moods", status_code=201, response_model=MoodEntry)
def add_mood(payload: CreateMoodEntry, store: EntryStore = Depends(get_store)):
    try:
        entry = store.insert(payload.category, payload.description or "", payload.time)
    except InvalidEntry as e:
        raise HTTPException(status_code=422, detail=e.errors)
    if entry is None:
        raise HTTPException(status_code=502, detail=store.last_error)
    return entry


@app.get("/api/moods/summary", response_model=MonthlySummary)
def month_summary(store: EntryStore = Depends(get_store)):
    if not store.load(store.sort_ascending):
        raise HTTPException(status_code=502, detail=store.last_error)
    now = datetime.now(store.tz)
    return MonthlySummary(year=now.year, month=now.month, counts=monthly_counts(store.entries, now))


@app.get("/api/moods/export")
def export_moods(store: EntryStore = Depends(get_store)):
    if not store.load(sort_ascending=True):
        raise HTTPException(status_code=502, detail=store.last_error)
    entries = store.entries

    def generate_csv():
        yield "time,category,description\n"
        for e in entries:
            yield f"{utc_iso(e.time)},\"{_csv_text(e.category)}\",\"{_csv_text(e.description)}\"\n"

    return StreamingResponse(generate_csv(), media_type="text/csv", headers={
        "Content-Disposition": "attachment; filename=moods.csv"
    })


@app.delete("/api/moods/{entry_id}")
def delete_mood(entry_id: int, store: EntryStore = Depends(get_store)):
    if not store.delete(entry_id):
        missing = isinstance(store.last_failure, NotFound)
        raise HTTPException(status_code=404 if missing else 502, detail=store.last_error)
    return {"status": "deleted"}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
