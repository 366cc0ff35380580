import logging
import re
from collections import Counter
from typing import Iterable

from exa_py import AsyncExa
from exa_py.api import ResultWithText, SearchResponse

from podscript.core.config import settings
from podscript.core.errors import SearchUnavailable
from podscript.core.services import get_exa_client
from podscript.models import ResearchBundle, SearchResult

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 10
MIN_KEYWORD_LENGTH = 4
DESCRIPTION_LENGTH = 500

# fmt: off
STOPWORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
        "about", "after", "also", "been", "before", "being", "between", "both", "could", "does",
        "each", "from", "have", "here", "into", "just", "like", "many", "more", "most", "much",
        "only", "other", "over", "same", "some", "such", "than", "that", "their", "them", "then",
        "there", "these", "they", "this", "those", "through", "very", "were", "what", "when",
        "where", "which", "while", "will", "would", "your", "https", "http", "www",
    }
)
# fmt: on


def extract_top_words(results: Iterable[SearchResult], limit: int = MAX_KEYWORDS) -> list[str]:
    """
    Returns the most frequent keywords across result titles and descriptions.
    Ties keep the order in which words were first seen.
    """
    text = " ".join(f"{r.title} {r.description}" for r in results).lower()
    words = [
        word
        for word in re.split(r"\W+", text)
        if len(word) >= MIN_KEYWORD_LENGTH and word not in STOPWORDS
    ]

    counts = Counter(words)
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [word for word, _ in ranked[:limit]]


def to_search_result(result: ResultWithText) -> SearchResult:
    description = getattr(result, "summary", None) or (result.text or "")[:DESCRIPTION_LENGTH]
    return SearchResult(
        title=result.title or "",
        description=description.strip(),
        url=result.url or "",
    )


async def web_search(
    query: str,
    num_results: int = settings.search_num_results,
    client: AsyncExa | None = None,
) -> list[SearchResult]:
    """Searches the web once for the query. Provider failures surface as SearchUnavailable."""
    exa_client = client or get_exa_client()
    try:
        response: SearchResponse[ResultWithText] = await exa_client.search_and_contents(
            query, text=True, num_results=num_results, type="auto"
        )
    except Exception as e:
        logger.error("Search request failed for %r: %s", query, e)
        raise SearchUnavailable(f"Search provider error: {e}") from e

    return [to_search_result(r) for r in response.results]


async def collect_research(
    topic: str,
    num_results: int = settings.search_num_results,
    client: AsyncExa | None = None,
) -> ResearchBundle:
    if not topic or not topic.strip():
        raise ValueError("Topic must not be empty")

    results = await web_search(topic, num_results=num_results, client=client)
    keywords = extract_top_words(results)
    logger.info("Collected %d search results for %r, keywords: %s", len(results), topic, keywords)

    return ResearchBundle(topic=topic, raw_results=results, top_keywords=keywords)
