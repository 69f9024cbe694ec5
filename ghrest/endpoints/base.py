"""Base class for API endpoint groups.

Endpoint groups are thin: they build paths, send them through the
executor or the paginated fetcher, and parse payloads into models. Any
failure is raised as the matching exception.

"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, TypeVar
from urllib.parse import quote, urlencode

from pydantic import BaseModel

if TYPE_CHECKING:
    from ghrest.config import ClientConfig
    from ghrest.executor import SingleResourceExecutor
    from ghrest.results import PageResult
    from ghrest.utils.pagination import PaginatedFetcher

T = TypeVar("T", bound=BaseModel)


class BaseEndpoint:
    """Base class for API endpoint groups.

    Attributes:
        _executor: Dispatches single requests.
        _fetcher: Collects paginated listings.
        _config: Client configuration.

    """

    __slots__ = ("_config", "_executor", "_fetcher")

    def __init__(
        self,
        executor: SingleResourceExecutor,
        fetcher: PaginatedFetcher,
        config: ClientConfig,
    ) -> None:
        self._executor = executor
        self._fetcher = fetcher
        self._config = config

    def _single(
        self,
        verb: str,
        path: str,
        *,
        json_data: Any = None,
        expected_statuses: int | Iterable[int] | None = None,
        required_scopes: Iterable[str] | None = None,
    ) -> Any:
        """Perform one request and return its payload.

        Raises:
            GitHubError: The exception matching any failure.

        """
        result = self._executor.execute(
            verb,
            path,
            json_data=json_data,
            expected_statuses=expected_statuses,
            required_scopes=required_scopes,
        )
        return result.unwrap()

    def _paged(
        self,
        path: str,
        model: type[T],
        limit: int | None = None,
        params: dict[str, Any] | None = None,
    ) -> PageResult[T]:
        """Collect a paginated listing, parsing each item into ``model``.

        A mid-stream failure is kept on the returned PageResult rather than
        raised, so callers can keep the partial listing.

        """
        query = {k: v for k, v in (params or {}).items() if v is not None}
        url = f"{path}?{urlencode(query)}" if query else path
        return self._fetcher.fetch_pages(url, item_transform=model.model_validate, page_limit=limit)

    def _parse(self, data: Any, model: type[T]) -> T:
        return model.model_validate(data)


def segment(value: str | int) -> str:
    """Quote one path segment."""
    return quote(str(value), safe="")
