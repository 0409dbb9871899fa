"""
Infrastructure layer: HTTP client and markup parser for species factors.
"""
import logging
from typing import Dict, Optional

import httpx
from lxml import etree, html

from tree_valuation.config import settings
from tree_valuation.infrastructure.api_constants import APIConstants, FactorPageLocators

logger = logging.getLogger(__name__)


class FactorSourceError(Exception):
    """Raised when the factor page cannot be downloaded."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def parse_factor_options(markup: str, select_id: str) -> Dict[str, float]:
    """
    Parse the options of a <select> element into species factors.

    Options whose value attribute is empty or not a number are skipped.
    Later options with the same text overwrite earlier ones.

    Args:
        markup: HTML document text
        select_id: id attribute of the <select> element

    Returns:
        Mapping of option text to numeric factor (empty if the select is absent)

    Raises:
        ValueError: If the markup cannot be parsed as HTML at all
    """
    if not markup or not markup.strip():
        raise ValueError("Factor page is empty")

    try:
        document = html.fromstring(markup)
    except (etree.ParserError, ValueError) as e:
        raise ValueError(f"Factor page is not valid HTML: {e}") from e

    factors: Dict[str, float] = {}
    skipped = 0

    for option in document.xpath(FactorPageLocators.options_for(select_id)):
        raw_value = (option.get("value") or "").strip()
        text = option.text_content().strip()

        if not raw_value or not text:
            skipped += 1
            continue

        try:
            factors[text] = float(raw_value)
        except ValueError:
            skipped += 1

    if skipped:
        logger.debug(f"Skipped {skipped} options without a numeric factor")

    return factors


class FactorSourceClient:
    """
    Client for the official tree value calculator page.

    A single bounded-timeout GET; failures are reported as FactorSourceError
    and never retried here.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the client with configuration.

        Args:
            url: Page URL (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
        """
        self.url = url or settings.factor_source_url
        self.timeout = timeout or settings.factor_fetch_timeout
        self.client = httpx.AsyncClient(
            headers=APIConstants.BROWSER_HEADERS,
            timeout=self.timeout,
            follow_redirects=True,
        )

    async def __aenter__(self) -> "FactorSourceClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def fetch_page(self) -> str:
        """
        Download the calculator page.

        Returns:
            Page HTML

        Raises:
            FactorSourceError: On timeout, transport error, invalid URL or non-2xx status
        """
        logger.info(f"Downloading factor page from {self.url}")
        try:
            response = await self.client.get(self.url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise FactorSourceError(f"Factor page request timed out after {self.timeout}s: {e}")
        except httpx.HTTPStatusError as e:
            raise FactorSourceError(
                f"Factor page request failed: {e.response.status_code}",
                status_code=e.response.status_code,
            )
        except httpx.RequestError as e:
            raise FactorSourceError(f"Factor page request error: {str(e)}")
        except (httpx.InvalidURL, httpx.HTTPError) as e:
            raise FactorSourceError(f"Factor page request could not be made: {str(e)}")

        logger.info("Successfully received factor page")
        return response.text

    async def fetch_factors(self, select_id: Optional[str] = None) -> Dict[str, float]:
        """
        Download the page and parse its species factors.

        Args:
            select_id: id of the <select> element (defaults to settings)

        Returns:
            Mapping of species name to factor

        Raises:
            FactorSourceError: If the page cannot be downloaded or parsed
        """
        markup = await self.fetch_page()
        try:
            return parse_factor_options(markup, select_id or settings.factor_select_id)
        except ValueError as e:
            raise FactorSourceError(str(e))
