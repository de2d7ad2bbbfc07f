"""HTTP tests for the creation and entries views."""

from __future__ import annotations

from datetime import datetime, timezone

from conftest import utc
from confirmation import DeleteState


# ---- creation view ----


def test_form_defaults(client):
    res = client.get("/")
    assert res.status_code == 200
    assert 'type="datetime-local"' in res.text
    assert '<option value="Happy" selected>' in res.text


def test_submit_saves_and_redirects(client, table):
    res = client.post(
        "/",
        data={"category": "Grateful", "description": "Tea with friends", "time": "2024-03-15T16:30"},
        follow_redirects=False,
    )
    assert res.status_code == 303
    assert res.headers["location"] == "/?saved=1"
    assert table.rows[0]["time"] == utc(2024, 3, 15, 16, 30)


def test_submit_invalid_shows_inline_errors(client, table):
    res = client.post("/", data={"category": "", "description": "kept text", "time": ""})
    assert res.status_code == 200
    assert 'id="category-error"' in res.text
    assert 'id="time-error"' in res.text
    assert "kept text" in res.text
    assert table.rows == []


def test_submit_failure_keeps_input(client, table):
    table.fail.add("insert")
    res = client.post("/", data={"category": "Calm", "description": "quiet morning", "time": "2024-03-15T07:00"})
    assert res.status_code == 200
    assert 'role="alert"' in res.text
    assert "quiet morning" in res.text
    assert 'value="2024-03-15T07:00"' in res.text


# ---- entries view ----


def test_entries_list_and_tracker(client, table):
    now = datetime.now(timezone.utc)
    table.add("Sad", now, "rainy")
    table.add("Mystery", utc(2001, 1, 1, 9))
    res = client.get("/entries")
    assert res.status_code == 200
    assert "rainy" in res.text
    assert "❓ Mystery" in res.text
    assert "No entries yet this month." not in res.text
    assert 'id="entry-1"' in res.text and 'id="entry-2"' in res.text


def test_entries_empty_month(client):
    res = client.get("/entries")
    assert "No entries yet this month." in res.text


def test_entries_filter(client, table):
    table.add("Sad", utc(2024, 3, 10, 9))
    table.add("Happy", utc(2024, 3, 11, 9))
    res = client.get("/entries", params={"category": "Happy"})
    assert 'id="entry-2"' in res.text
    assert 'id="entry-1"' not in res.text


def test_entries_sort_toggle(client, table):
    table.add("Sad", utc(2024, 3, 10, 9))
    table.add("Happy", utc(2024, 3, 11, 9))
    text = client.get("/entries", params={"order": "asc"}).text
    assert "Oldest First" in text
    assert text.index('id="entry-1"') < text.index('id="entry-2"')


def test_load_failure_shows_notice(client, table):
    table.fail.add("select")
    res = client.get("/entries")
    assert res.status_code == 200
    assert 'role="alert"' in res.text


def test_delete_request_then_cancel(client, table, confirmation):
    table.add("Sad", utc(2024, 3, 10, 9))
    table.add("Calm", utc(2024, 3, 11, 9))
    table.add("Calm", utc(2024, 3, 12, 9))
    table.add("Calm", utc(2024, 3, 13, 9))
    table.add("Calm", utc(2024, 3, 14, 9))
    client.post("/entries/5/delete", data={"order": "desc", "category": "All"})
    assert confirmation.state == DeleteState.PENDING
    assert "Delete Entry?" in client.get("/entries").text

    client.post("/entries/delete/cancel", data={"order": "desc", "category": "All"})
    assert confirmation.state == DeleteState.IDLE
    assert 'id="entry-5"' in client.get("/entries").text
    assert not any(c[0] == "delete" for c in table.calls)


def test_delete_confirm(client, table):
    table.add("Sad", utc(2024, 3, 10, 9))
    client.get("/entries")
    client.post("/entries/1/delete", data={"order": "desc", "category": "All"})
    res = client.post("/entries/delete/confirm", data={"order": "desc", "category": "All"})
    assert res.status_code == 200
    assert 'id="entry-1"' not in res.text
    assert "Delete Entry?" not in res.text


def test_delete_confirm_failure_shows_notice(client, table, confirmation):
    table.add("Sad", utc(2024, 3, 10, 9))
    table.fail.add("delete")
    client.post("/entries/1/delete", data={"order": "desc", "category": "All"})
    res = client.post(
        "/entries/delete/confirm",
        data={"order": "desc", "category": "All"},
        follow_redirects=False,
    )
    assert res.status_code == 303
    assert "error=delete" in res.headers["location"]
    assert confirmation.state == DeleteState.IDLE
    page = client.get(res.headers["location"]).text
    assert "Could not delete the entry." in page
    assert 'id="entry-1"' in page
