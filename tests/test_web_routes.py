"""Tests for the FastAPI analysis routes."""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from tagscope.api.gemini_client import GenerationError
from tagscope.browser.element_extractor import UnparsableDocumentError, extract_elements
from tagscope.browser.fetcher import FetchError
from tagscope.core.analyzer import AnalysisResult
from tagscope.core.recovery import Recommendation
from tagscope.security.filter import SecurityError
from web.server import create_app


# ── Fixtures ─────────────────────────────────────────────────────────────────


def _mock_analyzer():
    analyzer = MagicMock()
    analyzer.extract_from_url = AsyncMock(
        return_value=extract_elements('<button id="buy">Buy</button>')
    )
    analyzer.analyze = AsyncMock(
        return_value=AnalysisResult(
            url="https://example.com",
            elements=extract_elements('<button id="buy">Buy</button>'),
            recommendations=[
                Recommendation(element="Button - Buy", reason="Revenue", selector_code="#buy")
            ],
        )
    )
    analyzer.gemini = MagicMock()
    analyzer.gemini.generate_text = AsyncMock(return_value='```json\n[]\n```')
    analyzer.close = AsyncMock()
    return analyzer


@pytest.fixture
def analyzer():
    return _mock_analyzer()


@pytest.fixture
def client(settings, analyzer):
    return TestClient(create_app(settings, analyzer))


# ── Tests ────────────────────────────────────────────────────────────────────


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestHtmlConverter:
    def test_returns_elements(self, client, analyzer):
        resp = client.post("/api/html-converter", json={"url": "example.com"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["elements"][0]["selector"] == "#buy"
        assert body["elements"][0]["text"] == "Buy"
        analyzer.extract_from_url.assert_awaited_once_with("example.com")

    def test_missing_url(self, client):
        resp = client.post("/api/html-converter", json={})
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "error": "URL is required"}

    def test_upstream_status_forwarded(self, client, analyzer):
        analyzer.extract_from_url.side_effect = FetchError("HTTP 404", status_code=404)
        resp = client.post("/api/html-converter", json={"url": "https://example.com/x"})

        assert resp.status_code == 404
        body = resp.json()
        assert body["success"] is False
        assert body["error"] == "Failed to analyse page"
        assert body["status"] == 404

    def test_timeout_is_500(self, client, analyzer):
        analyzer.extract_from_url.side_effect = FetchError("Timed out")
        resp = client.post("/api/html-converter", json={"url": "https://example.com"})

        assert resp.status_code == 500
        assert resp.json()["details"] == "Timed out"

    def test_unparsable_document(self, client, analyzer):
        analyzer.extract_from_url.side_effect = UnparsableDocumentError("binary")
        resp = client.post("/api/html-converter", json={"url": "https://example.com"})
        assert resp.status_code == 500
        assert resp.json()["status"] is None

    def test_blocked_url(self, client, analyzer):
        analyzer.extract_from_url.side_effect = SecurityError("Blocked domain: evil.com")
        resp = client.post("/api/html-converter", json={"url": "https://evil.com"})
        assert resp.status_code == 400
        assert "Blocked domain" in resp.json()["error"]


class TestGeminiRoute:
    def test_returns_raw_text(self, client, analyzer):
        resp = client.post("/api/gemini", json={"input": {"elements": []}, "useFlash": True})

        assert resp.status_code == 200
        assert resp.json() == {"text": "```json\n[]\n```"}
        call = analyzer.gemini.generate_text.await_args
        assert call.kwargs["use_flash"] is True
        assert '{"elements": []}' in call.args[0]

    def test_invalid_json(self, client):
        resp = client.post(
            "/api/gemini",
            content="not json",
            headers={"content-type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid JSON in request body"}

    def test_missing_input(self, client):
        resp = client.post("/api/gemini", json={"useFlash": False})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing required field: input"}

    def test_generation_failure(self, client, analyzer):
        analyzer.gemini.generate_text.side_effect = GenerationError("quota")
        resp = client.post("/api/gemini", json={"input": "[]"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Error generating content"}


class TestAnalyzeRoute:
    def test_full_pipeline(self, client, analyzer):
        resp = client.post("/api/analyze", json={"url": "example.com"})

        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "url": "https://example.com",
            "elementCount": 1,
            "recommendations": [
                {"element": "Button - Buy", "reason": "Revenue", "selectorCode": "#buy"}
            ],
        }
        assert analyzer.analyze.await_args.kwargs["use_flash"] is False

    def test_generation_failure_is_502(self, client, analyzer):
        analyzer.analyze.side_effect = GenerationError("quota")
        resp = client.post("/api/analyze", json={"url": "example.com"})
        assert resp.status_code == 502

    def test_fetch_failure(self, client, analyzer):
        analyzer.analyze.side_effect = FetchError("HTTP 403", status_code=403)
        resp = client.post("/api/analyze", json={"url": "example.com"})
        assert resp.status_code == 403

    def test_missing_url(self, client):
        resp = client.post("/api/analyze", json={"useFlash": True})
        assert resp.status_code == 400
