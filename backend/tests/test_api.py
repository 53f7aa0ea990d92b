"""
Tests for Readable FastAPI routes.
"""
import asyncio
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.routes import sessions as sessions_route
from core.exceptions import ArticleFetchError, ProviderError, ProviderErrorKind
from core.llm_client import llm_client
from models.quiz_models import QuizResult
from services.ingestion.article_extractor import article_extractor
from services.reading.session import ReadingSession

client = TestClient(app)

PREFIX = "/api/v1/sessions"

ARTICLE_HTML = (
    "<html><head><title>Volcanoes</title></head><body><article><h1>Volcanoes</h1>"
    + "".join(
        "<p>" + " ".join(f"p{i}w{j}" for j in range(30)) + "</p>" for i in range(8)
    )
    + "</article></body></html>"
)

QUIZ = QuizResult(
    question="What erupts?",
    options=("A. Lava", "B. Ice", "C. Sand", "D. Wind"),
    correct="A",
)


class StubGenerator:
    def __init__(self, provider=None, api_key=None):
        self.is_enabled = bool(api_key)

    async def agenerate_question(self, context):
        return QUIZ


@pytest.fixture(autouse=True)
def isolated_sessions():
    sessions_route.sessions.clear()
    with patch("api.routes.sessions.get_provider_api_key", return_value=None):
        yield
    sessions_route.sessions.clear()


def create_session(**body):
    payload = {"html": ARTICLE_HTML, "chunk_size": 50}
    payload.update(body)
    return client.post(PREFIX, json=payload)


class TestRoot:
    def test_root(self):
        r = client.get("/")
        assert r.status_code == 200
        assert r.json()["message"] == "Readable API"

    def test_health(self):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json() == {"status": "healthy"}


class TestCreateSession:
    """POST /sessions"""

    def test_from_html(self):
        r = create_session()
        assert r.status_code == 200
        data = r.json()

        assert data["title"] == "Volcanoes"
        assert data["quizzes_enabled"] is False
        assert len(data["slides"]) == 9
        assert data["slides"][0]["kind"] == "title"
        assert [s["position"] for s in data["slides"]] == list(range(9))
        assert data["stats"]["chunk_count"] == 8
        assert data["session_id"] in sessions_route.sessions

    def test_html_parsed_off_event_loop(self):
        with patch("api.routes.sessions.asyncio.to_thread", wraps=asyncio.to_thread) as mock_to_thread:
            r = create_session()

        assert r.status_code == 200
        func, html, url = mock_to_thread.call_args.args
        assert func.__name__ == "start"
        assert html == ARTICLE_HTML
        assert url is None

    def test_requires_url_or_html(self):
        r = client.post(PREFIX, json={"chunk_size": 50})
        assert r.status_code == 400

    def test_invalid_chunk_size(self):
        r = create_session(chunk_size=0)
        assert r.status_code == 422

    def test_no_article(self):
        r = create_session(html="<html><body><script>x()</script></body></html>")
        assert r.status_code == 422

    def test_fetch_failure(self):
        with patch.object(article_extractor, "fetch_html", side_effect=ArticleFetchError("timeout")):
            r = client.post(PREFIX, json={"url": "https://example.com/post"})
        assert r.status_code == 502

    def test_from_url(self):
        with patch.object(article_extractor, "fetch_html", return_value=ARTICLE_HTML):
            r = client.post(PREFIX, json={"url": "https://example.com/post", "chunk_size": 50})
        assert r.status_code == 200
        assert r.json()["url"] == "https://example.com/post"


class TestSessionLifecycle:
    """GET, navigate, answer and DELETE."""

    def test_unknown_session(self):
        assert client.get(f"{PREFIX}/session_missing").status_code == 404
        assert client.post(f"{PREFIX}/session_missing/navigate", json={"position": 1}).status_code == 404
        assert client.delete(f"{PREFIX}/session_missing").status_code == 404

    def test_navigate_records_progress(self):
        session_id = create_session().json()["session_id"]

        r = client.post(f"{PREFIX}/{session_id}/navigate", json={"position": 1})
        assert r.status_code == 200
        assert r.json()["inserted"] is None
        assert r.json()["slide_count"] == 9

        stats = client.get(f"{PREFIX}/{session_id}").json()["stats"]
        assert stats["chunks_read"] == 1

    @patch.object(ReadingSession, "start_background", return_value=None)
    @patch("services.reading.session.QuizGenerator", StubGenerator)
    def test_quiz_answer_flow(self, _start_background):
        session_id = create_session(api_key="test-key").json()["session_id"]

        r = client.post(f"{PREFIX}/{session_id}/navigate", json={"position": 4, "wait": True})
        assert r.status_code == 200
        inserted = r.json()["inserted"]
        assert inserted["kind"] == "quiz"
        assert inserted["position"] == 5
        assert inserted["quiz"]["question"] == "What erupts?"

        r = client.post(f"{PREFIX}/{session_id}/answers", json={"slide_id": inserted["slide_id"], "answer": "A"})
        assert r.status_code == 200
        assert r.json()["correct"] is True
        assert r.json()["stats"]["quiz_total"] == 1

        r = client.post(f"{PREFIX}/{session_id}/answers", json={"slide_id": inserted["slide_id"], "answer": "C"})
        assert r.json()["counted"] is False

        r = client.post(f"{PREFIX}/{session_id}/answers", json={"slide_id": inserted["slide_id"], "answer": "X"})
        assert r.status_code == 400

    def test_answer_unknown_slide(self):
        session_id = create_session().json()["session_id"]

        r = client.post(f"{PREFIX}/{session_id}/answers", json={"slide_id": "slide_nope", "answer": "A"})
        assert r.status_code == 404

    def test_delete(self):
        session_id = create_session().json()["session_id"]

        r = client.delete(f"{PREFIX}/{session_id}")
        assert r.status_code == 200
        assert r.json()["status"] == "closed"
        assert client.get(f"{PREFIX}/{session_id}").status_code == 404


class TestAskAboutSelection:
    """POST /sessions/{id}/ask"""

    @patch.object(ReadingSession, "start_background", return_value=None)
    def test_explain_selection(self, _start_background):
        session_id = create_session(api_key="test-key").json()["session_id"]

        with patch.object(llm_client, "generate", return_value="Molten rock rises.") as mock_generate:
            r = client.post(f"{PREFIX}/{session_id}/ask", json={"text": "magma chamber", "prompt_type": "why"})

        assert r.status_code == 200
        assert r.json() == {"session_id": session_id, "prompt_type": "why", "answer": "Molten rock rises."}
        prompt, provider, api_key = mock_generate.call_args.args
        assert prompt.startswith("Why is this the case?")
        assert '"magma chamber"' in prompt
        assert api_key == "test-key"

    @patch.object(ReadingSession, "start_background", return_value=None)
    def test_custom_prompt_required(self, _start_background):
        session_id = create_session(api_key="test-key").json()["session_id"]

        r = client.post(f"{PREFIX}/{session_id}/ask", json={"text": "magma", "prompt_type": "custom"})
        assert r.status_code == 400

        r = client.post(f"{PREFIX}/{session_id}/ask", json={"text": "magma", "prompt_type": "summarize"})
        assert r.status_code == 422

    def test_without_api_key(self):
        session_id = create_session().json()["session_id"]

        r = client.post(f"{PREFIX}/{session_id}/ask", json={"text": "magma"})
        assert r.status_code == 400
        assert r.json()["detail"] == "API key not configured"

    @patch.object(ReadingSession, "start_background", return_value=None)
    def test_provider_failure(self, _start_background):
        session_id = create_session(api_key="test-key").json()["session_id"]
        error = ProviderError(ProviderErrorKind.RATE_LIMIT, "Rate limit exceeded")

        with patch.object(llm_client, "generate", side_effect=error):
            r = client.post(f"{PREFIX}/{session_id}/ask", json={"text": "magma", "prompt_type": "how"})

        assert r.status_code == 502
        assert r.json()["detail"] == "Rate limit exceeded"

    def test_unknown_session(self):
        r = client.post(f"{PREFIX}/session_missing/ask", json={"text": "magma"})
        assert r.status_code == 404
