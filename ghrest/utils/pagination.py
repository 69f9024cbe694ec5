"""Link-header pagination for GitHub API responses.

GitHub Link Header Format:
    Link: <url>; rel="next", <url>; rel="last", <url>; rel="first", <url>; rel="prev"

Only ``rel="next"`` drives the fetch loop. URLs go through a FIFO cursor
queue that refuses anything already queued or consumed, so a cyclic
``next`` link cannot loop forever.

Example:
    >>> fetcher = PaginatedFetcher(executor, context)
    >>> result = fetcher.fetch_pages("/repos/octocat/hello-world/issues", page_limit=50)
    >>> len(result), result.complete
    (50, True)

"""

from __future__ import annotations

import logging
import re
from collections import deque
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ghrest.results import PageResult

if TYPE_CHECKING:
    from ghrest.context import ClientContext
    from ghrest.executor import SingleResourceExecutor

logger = logging.getLogger(__name__)

# Matches: <url>; rel="relation"
LINK_PATTERN = re.compile(r'<(.*?)>;\s*rel="(.*?)"')

DEFAULT_PAGE_LIMIT = 1000
DEFAULT_PAGE_DELAY = 3.0


def parse_link_header(link_header: str | None) -> dict[str, str]:
    """Parse GitHub's Link header into a relation-to-URL mapping.

    Args:
        link_header: The Link header value.

    Returns:
        Mapping of rel names to URLs; empty when the header is absent or
        nothing in it matches.

    Example:
        >>> parse_link_header('<https://api.github.com/repos?page=2>; rel="next"')
        {'next': 'https://api.github.com/repos?page=2'}

    """
    if not link_header:
        return {}

    links: dict[str, str] = {}
    for match in LINK_PATTERN.finditer(link_header):
        url, rel = match.groups()
        if url and rel and rel not in links:
            links[rel] = url
    return links


class PageCursorQueue:
    """FIFO of page URLs that never yields the same URL twice."""

    __slots__ = ("_queue", "_seen")

    def __init__(self, seed: str | None = None) -> None:
        self._queue: deque[str] = deque()
        self._seen: set[str] = set()
        if seed:
            self.push(seed)

    def push(self, url: str) -> bool:
        """Enqueue ``url`` unless it was queued or consumed before.

        Returns:
            True if the URL was enqueued.

        """
        if not url or url in self._seen:
            return False
        self._seen.add(url)
        self._queue.append(url)
        return True

    def pop(self) -> str:
        """Remove and return the oldest queued URL.

        Raises:
            IndexError: If the queue is empty.

        """
        return self._queue.popleft()

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)


class PaginatedFetcher:
    """Collects items across Link-paginated responses.

    Attributes:
        default_limit: Item ceiling when a call gives none.
        default_delay: Pause between pages when a call gives none.

    """

    __slots__ = ("_context", "_executor", "default_delay", "default_limit")

    def __init__(
        self,
        executor: SingleResourceExecutor,
        context: ClientContext,
        default_limit: int = DEFAULT_PAGE_LIMIT,
        default_delay: float = DEFAULT_PAGE_DELAY,
    ) -> None:
        self._executor = executor
        self._context = context
        self.default_limit = default_limit
        self.default_delay = default_delay

    def fetch_pages(
        self,
        initial_url: str,
        item_transform: Callable[[Any], Any] | None = None,
        page_limit: int | None = None,
        inter_page_delay: float | None = None,
    ) -> PageResult[Any]:
        """Fetch pages until ``page_limit`` items are collected or links run out.

        Whole pages are kept, so the result can exceed ``page_limit`` by up
        to one page. If a page request fails, the items from earlier pages
        are returned together with the failure.

        Args:
            initial_url: First page URL or path.
            item_transform: Applied to each raw item before it is collected.
            page_limit: Item ceiling; defaults to ``default_limit``.
            inter_page_delay: Seconds between page requests; defaults to
                ``default_delay``.

        Returns:
            PageResult holding the items and any terminating failure.

        Raises:
            Exception: Whatever ``item_transform`` raises is not caught; the
                items collected so far are discarded with it.

        """
        limit = self.default_limit if page_limit is None else page_limit
        delay = self.default_delay if inter_page_delay is None else inter_page_delay

        queue = PageCursorQueue(initial_url)
        result: PageResult[Any] = PageResult()

        while len(result.items) < limit and queue:
            url = queue.pop()
            page = self._executor.get(url)
            if not page.ok:
                logger.warning(
                    "Pagination stopped at %s after %d page(s): %s",
                    url,
                    result.pages_fetched,
                    page.message,
                )
                result.failure = page
                return result

            result.pages_fetched += 1
            next_url = parse_link_header(page.link_header).get("next")
            if next_url:
                queue.push(next_url)

            for item in _page_items(page.payload, url):
                result.items.append(item_transform(item) if item_transform else item)

            if delay > 0 and len(result.items) < limit and queue:
                self._context.sleep(delay)

        logger.debug("Fetched %d item(s) over %d page(s)", len(result.items), result.pages_fetched)
        return result


def _page_items(payload: Any, url: str) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("items"), list):
        return payload["items"]
    logger.warning("Page %s did not contain a list of items", url)
    return []
