"""URL guard for page analysis requests.

Normalises user-supplied URLs and checks them against domain
blocklists/allowlists before anything is fetched.
"""

from typing import Set
from urllib.parse import urlparse

from loguru import logger


class SecurityError(Exception):
    """Raised when a URL violates a security constraint."""


class SecurityFilter:
    """Validation guard run before every page fetch."""

    ALLOWED_SCHEMES = {"http", "https"}

    def __init__(
        self,
        blocked_domains: Set[str] | None = None,
        allowed_domains: Set[str] | None = None,
    ):
        """Initialise the filter.

        Args:
            blocked_domains: Domains that are always blocked
            allowed_domains: If non-empty, only these domains are allowed
        """
        self.blocked_domains = {d.lower() for d in (blocked_domains or set())}
        self.allowed_domains = {d.lower() for d in (allowed_domains or set())}

    @staticmethod
    def normalize_url(url: str) -> str:
        """Strip whitespace and default to https when no scheme is given."""
        url = url.strip()
        if "://" not in url:
            url = "https://" + url
        return url

    def validate_url(self, url: str) -> bool:
        """Validate a URL against scheme rules and the domain lists.

        Args:
            url: URL to validate

        Returns:
            True if URL is safe

        Raises:
            SecurityError: If URL is malformed or blocked
        """
        parsed = urlparse(url)
        if parsed.scheme.lower() not in self.ALLOWED_SCHEMES:
            raise SecurityError(f"Unsupported URL scheme: {parsed.scheme or '(none)'}")

        domain = (parsed.hostname or "").lower()
        if not domain:
            raise SecurityError(f"URL has no host: {url}")

        if self._matches(domain, self.blocked_domains):
            logger.warning(f"Blocked analysis request for {domain}")
            raise SecurityError(f"Blocked domain: {domain}")

        # Empty allowlist allows everything
        if self.allowed_domains and not self._matches(domain, self.allowed_domains):
            raise SecurityError(f"Domain not in allowlist: {domain}")

        return True

    def check(self, url: str) -> str:
        """Normalise then validate; returns the URL to fetch."""
        normalized = self.normalize_url(url)
        self.validate_url(normalized)
        return normalized

    @staticmethod
    def _matches(domain: str, domains: Set[str]) -> bool:
        return any(domain == d or domain.endswith("." + d) for d in domains)
