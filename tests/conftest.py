import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app
from schemas import ColumnProfile, Dataset

SALES_CSV = (
    "region,product,amount,date\n"
    "North,Widget,10,2024-01-05\n"
    "North,Gadget,20,2024-01-06\n"
    'South,"Widget, Large",5,2024-01-07\n'
)


@pytest.fixture
def sales_csv():
    return SALES_CSV


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings))


@pytest.fixture
def make_dataset():
    """Build a dataset by hand, bypassing type inference."""

    def _make(columns, rows, types=None):
        types = types or {}
        profiles = [ColumnProfile(name=c, inferred_type=types.get(c, "text")) for c in columns]
        return Dataset(name="manual.json", source_kind="json", columns=profiles, rows=rows)

    return _make
