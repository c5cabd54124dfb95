"""
Shared pytest fixtures for backend tests.
Claude is never called: tests swap in a fake client or a fake analyzer.
"""
import pytest
import sys
import os
from types import SimpleNamespace

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from normalizer import sanitize_tasks

DAY_CANDIDATES = [
    {"task": "Pay rent", "urgency": "high", "importance": "high", "estimated_time_minutes": 10},
    {"task": "Plan quarterly goals", "urgency": "low", "importance": "high", "estimated_time_minutes": 90},
    {"task": "Reply to Sam", "urgency": "high", "importance": "low", "estimated_time_minutes": 5},
    {"task": "Sort inbox", "urgency": "low", "importance": "low", "estimated_time_minutes": 30},
    {"task": "Book dentist", "urgency": "high", "importance": "high", "estimated_time_minutes": 5},
]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def day_tasks():
    """Five tasks covering every matrix quadrant, in analysis order."""
    return sanitize_tasks(DAY_CANDIDATES)


class FakeMessages:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.reply)])


@pytest.fixture
def fake_client():
    """
    Stand-in for anthropic.AsyncAnthropic.
    Set ``fake_client.messages.reply`` or ``.error`` before use.
    """
    return SimpleNamespace(messages=FakeMessages())


@pytest.fixture
def fake_analyzer(monkeypatch):
    """
    Replace the Claude call in main with a canned result.
    Returns a dict: set "candidates" for the raw tasks, or "error" to fail.
    """
    import main
    from analyzer import AnalysisError

    state = {"candidates": DAY_CANDIDATES, "error": None, "inputs": []}

    async def fake_analyze(text, client, model, max_tokens=1024):
        state["inputs"].append(text)
        if state["error"]:
            raise AnalysisError(state["error"])
        return sanitize_tasks(state["candidates"])

    monkeypatch.setattr(main, "analyze_with_claude", fake_analyze)
    monkeypatch.setattr(main, "ANTHROPIC_API_KEY", "test-key")
    return state


@pytest.fixture
def app_client(fake_analyzer):
    """
    Create a test client for the FastAPI app.
    Each client gets a fresh session store through the lifespan.
    """
    from fastapi.testclient import TestClient
    import main

    with TestClient(main.app) as client:
        yield client


@pytest.fixture
def session_id(app_client):
    return app_client.post("/api/sessions").json()["session_id"]
