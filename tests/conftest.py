# tests/conftest.py
import os
import sys
import asyncio

import pytest
from fastapi.testclient import TestClient

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from factories import FakeAdvisor, FakeOpenAI, sample_response_dict  # noqa: E402
from stellar_finance.schemas import ApiResponse, UserInput  # noqa: E402


# --- event loop propio por test (los tests async se corren con run_until_complete) ---
@pytest.fixture(autouse=True)
def fix_event_loop():
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        yield loop
    finally:
        loop.close()


@pytest.fixture()
def run(fix_event_loop):
    return fix_event_loop.run_until_complete


@pytest.fixture(autouse=True)
def dummy_api_key(monkeypatch):
    # Nunca pegamos al endpoint real: todos los tests usan clientes falsos
    monkeypatch.setenv("OPENAI_API_KEY", "dummy")
    yield


# ---------- Datos de ejemplo ----------
@pytest.fixture()
def sample_input():
    return UserInput(
        monthly_income=5000,
        credit_score="Good (690-719)",
        down_payment=5000,
        term=60,
        lifestyle="Daily Commuter",
    )


@pytest.fixture()
def sample_response():
    return ApiResponse.model_validate(sample_response_dict())


@pytest.fixture()
def fake_advisor():
    return FakeAdvisor()


@pytest.fixture()
def fake_openai():
    return FakeOpenAI


# ---------- TestClient de FastAPI ----------
@pytest.fixture()
def client(fake_advisor):
    from stellar_finance.main import create_app
    with TestClient(create_app(advisor=fake_advisor)) as c:
        yield c
