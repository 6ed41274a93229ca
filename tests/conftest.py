"""Shared fixtures: an in-memory row store standing in for the sheet."""
import pytest
from fastapi.testclient import TestClient

from workshop_registration.main import app
from workshop_registration.schemas import Slot
from workshop_registration.sheets import get_row_store


class FakeRowStore:
    """Keeps rows in a list and counts calls, like a sheet nobody else edits."""

    def __init__(self, rows=None):
        self.rows = [list(r) for r in (rows or [])]
        self.reads = 0
        self.appends = 0

    def get_rows(self):
        self.reads += 1
        return [list(r) for r in self.rows]

    def append_row(self, row):
        self.appends += 1
        self.rows.append(list(row))


def make_rows(morning=0, afternoon=0):
    """Build sheet rows holding the given number of registrations per slot."""
    rows = []
    for i in range(morning):
        rows.append([f"Morning {i}", f"m{i}@example.com", "9000000000", "No", "N/A", Slot.MORNING.value])
    for i in range(afternoon):
        rows.append([f"Afternoon {i}", f"a{i}@example.com", "9000000000", "No", "N/A", Slot.AFTERNOON.value])
    return rows


@pytest.fixture
def valid_payload():
    return {
        "name": "  Ada Lovelace ",
        "email": " ada@example.com",
        "contact": "9876543210 ",
        "isAffiliated": False,
        "affiliationId": "",
        "slot": Slot.MORNING.value,
    }


@pytest.fixture
def store():
    return FakeRowStore()


@pytest.fixture
def client(store):
    app.dependency_overrides[get_row_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
