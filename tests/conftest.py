import os
import sys
import tempfile

# Provider settings are read at import time; configure them before importing the app
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ["DEBUG"] = "true"
os.environ["RATE_LIMIT_PER_MINUTE"] = "10000"
os.environ["NOTIFY_WEBHOOK_URL"] = ""
os.environ["MEDIA_DIR"] = tempfile.mkdtemp(prefix="companion-media-")

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.data.stories import get_current_story
from app.services.session_store import VisitorSession, session_store


SESSION_ID = "testsession0001"


class MockAIMessage:
    """Stands in for a LangChain AIMessage."""

    def __init__(self, content):
        self.content = content


@pytest.fixture(autouse=True)
def clear_sessions():
    session_store._sessions.clear()
    yield
    session_store._sessions.clear()


@pytest.fixture
def story():
    return get_current_story()


@pytest.fixture
def visitor(story) -> VisitorSession:
    """A fresh session that is not registered in the global store."""
    return VisitorSession(session_id="unitsession", story=story)


@pytest.fixture
def stored_visitor(story) -> VisitorSession:
    """The session the API client talks to."""
    return session_store.get_or_create(SESSION_ID, story)


@pytest_asyncio.fixture
async def client():
    from app.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", headers={"X-Session-ID": SESSION_ID}) as ac:
        yield ac
