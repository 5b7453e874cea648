"""Optional web search used to enrich general-knowledge answers."""
import logging
from dataclasses import dataclass
from typing import List, Optional
import httpx

from config import GOOGLE_SEARCH_API_KEY, GOOGLE_SEARCH_ENGINE_ID

logger = logging.getLogger(__name__)

SEARCH_URL = "https://www.googleapis.com/customsearch/v1"


@dataclass
class SearchResult:
    title: str
    snippet: str
    url: str


class WebSearchClient:
    """
    Google Custom Search client.

    Every failure mode (missing credentials, HTTP errors, timeouts, no
    results) yields an empty list; web search only ever enriches an answer.
    """

    def __init__(
        self,
        api_key: Optional[str] = GOOGLE_SEARCH_API_KEY,
        engine_id: Optional[str] = GOOGLE_SEARCH_ENGINE_ID,
        max_results: int = 5,
        timeout: float = 10.0
    ):
        self.api_key = api_key
        self.engine_id = engine_id
        self.max_results = max_results
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.api_key and self.engine_id)

    def search(self, query: str) -> List[SearchResult]:
        """Search the web, returning at most max_results results."""
        if not self.enabled:
            logger.info("Web search not configured, using general knowledge")
            return []

        params = {
            "key": self.api_key,
            "cx": self.engine_id,
            "q": query,
            "num": self.max_results,
        }

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(SEARCH_URL, params=params)
            if response.status_code != 200:
                logger.warning(f"Web search failed with status {response.status_code}")
                return []
            items = response.json().get("items") or []
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Web search error: {e}")
            return []

        results = [
            SearchResult(
                title=item.get("title", ""),
                snippet=item.get("snippet", ""),
                url=item.get("link", ""),
            )
            for item in items[:self.max_results]
        ]
        logger.info(f"Web search returned {len(results)} results")
        return results

    @staticmethod
    def format_context(results: List[SearchResult]) -> str:
        return "\n\n".join(
            f"Source {idx}: {r.title}\n{r.snippet}\nURL: {r.url}"
            for idx, r in enumerate(results, 1)
        )
