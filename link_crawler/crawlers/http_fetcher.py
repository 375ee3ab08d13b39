"""
Fetcher that retrieves resources over HTTP.
"""

import re
from typing import Dict, List, Optional
from urllib.parse import urljoin

import requests

from link_crawler.concurrent.models import FetchResult
from link_crawler.utils.errors import NotFoundError, TransportError
from link_crawler.utils.logging import get_logger
from .base import BaseFetcher


logger = get_logger(__name__)

HREF_PATTERN = re.compile(r'<a\s[^>]*?href\s*=\s*["\']([^"\']+)["\']', re.IGNORECASE)

DEFAULT_USER_AGENT = "link-crawler/0.1 (+https://pypi.org/project/link-crawler/)"


def extract_links(html_content: str, base_url: str) -> List[str]:
    """
    Pull anchor targets out of an HTML document in document order.

    Relative targets are resolved against ``base_url``; anything that does
    not resolve to http(s) (mailto:, javascript:, in-page anchors) is dropped.
    """
    links = []
    for href in HREF_PATTERN.findall(html_content):
        href = href.strip()
        if not href or href.startswith("#"):
            continue
        absolute = urljoin(base_url, href)
        if absolute.startswith(("http://", "https://")):
            links.append(absolute)
    return links


class HTTPFetcher(BaseFetcher):
    """Fetcher issuing one GET per resource on a shared requests session."""

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None
    ):
        self.timeout = timeout
        self.session = session or self._create_session(user_agent)

    def _create_session(self, user_agent: str) -> requests.Session:
        session = requests.Session()
        session.headers.update({
            'User-Agent': user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        })
        return session

    def _fetch(self, resource_id: str) -> FetchResult:
        try:
            response = self.session.get(resource_id, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise TransportError(
                resource_id,
                f"request failed for {resource_id}: {e}",
                {"error_type": type(e).__name__}
            ) from e

        details: Dict[str, int] = {"status_code": response.status_code}
        if response.status_code == 404:
            raise NotFoundError(resource_id, details)
        if response.status_code >= 400:
            raise TransportError(
                resource_id,
                f"unexpected status {response.status_code} for {resource_id}",
                details
            )

        body = response.text
        links = extract_links(body, response.url or resource_id)
        logger.debug(
            "HTTP fetch successful",
            resource_id=resource_id,
            status_code=response.status_code,
            links=len(links)
        )
        return FetchResult(body=body, links=links)

    def close(self) -> None:
        """Close the HTTP session."""
        if self.session:
            self.session.close()


def build_http_fetcher(**options) -> HTTPFetcher:
    return HTTPFetcher(**options)
