"""Tagging analyzer - runs the fetch → extract → recommend → recover pipeline."""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from loguru import logger

from tagscope.api.gemini_client import GeminiClient
from tagscope.browser.element_extractor import ElementExtractor
from tagscope.browser.elements import InteractiveElement, elements_to_dicts
from tagscope.browser.fetcher import DocumentFetcher
from tagscope.core.recovery import (
    Recommendation,
    recommendations_to_dicts,
    recover_recommendations,
)
from tagscope.security.filter import SecurityFilter


@dataclass
class AnalysisResult:
    """Outcome of analysing one page."""

    url: str
    elements: List[InteractiveElement] = field(default_factory=list)
    recommendations: List[Recommendation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "url": self.url,
            "elementCount": len(self.elements),
            "recommendations": recommendations_to_dicts(self.recommendations),
        }


class TaggingAnalyzer:
    """Coordinates the collaborators for a single analysis request.

    Holds no per-request state; one instance can serve concurrent
    requests.
    """

    def __init__(
        self,
        config,
        fetcher: Optional[DocumentFetcher] = None,
        gemini: Optional[GeminiClient] = None,
        security: Optional[SecurityFilter] = None,
        extractor: Optional[ElementExtractor] = None,
    ):
        """Build the analyzer from settings.

        Args:
            config: Application settings (tagscope.config.Settings)
            fetcher: Override for the document fetcher
            gemini: Override for the Gemini client
            security: Override for the URL guard
            extractor: Override for the element extractor
        """
        self.config = config
        self.fetcher = fetcher or DocumentFetcher(
            timeout=config.fetch_timeout,
            user_agent=config.fetch_user_agent,
        )
        self.gemini = gemini or GeminiClient(
            api_key=config.google_api_key,
            model=config.gemini_model,
            flash_model=config.gemini_flash_model,
            max_output_tokens=config.gemini_max_output_tokens,
            temperature=config.gemini_temperature,
        )
        self.security = security or SecurityFilter(
            blocked_domains=config.blocked_domain_set,
            allowed_domains=config.allowed_domain_set,
        )
        self.extractor = extractor or ElementExtractor()

    async def extract_from_url(self, url: str) -> List[InteractiveElement]:
        """Fetch a page and return its interactive element inventory.

        Raises:
            SecurityError: If the URL is rejected
            FetchError: If the page cannot be retrieved
            UnparsableDocumentError: If the body is not markup
        """
        target = self.security.check(url)
        document = await self.fetcher.fetch(target)
        # Parsing large pages is CPU-bound; keep it off the event loop
        return await asyncio.to_thread(self.extractor.extract, document.html)

    async def recommend(
        self, elements: List[InteractiveElement], use_flash: bool = False
    ) -> List[Recommendation]:
        """Ask the model for recommendations and recover them from its reply.

        Raises:
            GenerationError: If the model call itself fails
        """
        inventory = {"success": True, "elements": elements_to_dicts(elements)}
        raw_text = await self.gemini.recommend(inventory, use_flash=use_flash)
        return recover_recommendations(raw_text)

    async def analyze(self, url: str, use_flash: bool = False) -> AnalysisResult:
        """Run the full pipeline for one URL."""
        logger.info(f"Analysing {url}")
        elements = await self.extract_from_url(url)
        result = AnalysisResult(url=self.security.normalize_url(url), elements=elements)

        if not elements:
            logger.info("No interactive elements found, skipping model call")
            return result

        result.recommendations = await self.recommend(elements, use_flash=use_flash)
        logger.info(
            f"Analysis of {result.url} complete: {len(elements)} elements, "
            f"{len(result.recommendations)} recommendations"
        )
        return result

    async def close(self):
        """Release network clients."""
        await self.fetcher.close()
        await self.gemini.close()
