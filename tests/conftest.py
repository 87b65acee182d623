"""Pytest configuration and fixtures."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from tagscope.browser.fetcher import FetchedDocument
from tagscope.config import Settings


SAMPLE_PAGE = """
<html>
  <body>
    <nav>
      <a class="nav link" href="/home">Home</a>
      <a id="signup" href="/signup"> Sign Up </a>
    </nav>
    <form id="login-form" action="/login" method="post">
      <input type="email" name="email" placeholder="Email">
      <input type="password" name="pw">
      <input type="submit" value="Log In">
    </form>
    <select name="country">
      <option> Canada </option>
      <option>France</option>
    </select>
    <button class="cta primary">Get started</button>
  </body>
</html>
"""


@pytest.fixture
def sample_page():
    return SAMPLE_PAGE


@pytest.fixture
def settings():
    """Settings isolated from the developer's .env."""
    return Settings(
        _env_file=None,
        google_api_key="test_key",
        blocked_domains="evil.com",
    )


@pytest.fixture
def mock_fetcher(sample_page):
    fetcher = MagicMock()
    fetcher.fetch = AsyncMock(
        return_value=FetchedDocument(
            url="https://example.com/",
            status_code=200,
            content_type="text/html; charset=utf-8",
            html=sample_page,
        )
    )
    fetcher.close = AsyncMock()
    return fetcher


@pytest.fixture
def mock_gemini():
    gemini = MagicMock()
    gemini.recommend = AsyncMock(
        return_value=(
            '```json\n[{"element": "Form - Log In", "reason": "Tracks sign-ins", '
            '"selector_code": "#login-form"},\n'
            '{"element": "Link - Sign Up", "reason": "Tracks registrations"},]\n```'
        )
    )
    gemini.generate_text = AsyncMock(return_value="[]")
    gemini.close = AsyncMock()
    return gemini
