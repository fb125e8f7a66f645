"""
Result pages and paginated result lists.

A ResultPage is the outcome of a single Query or Scan request. A PaginatedList
chains pages together behind the Sequence interface, fetching further pages
through a callback according to its PaginationLoadingStrategy:

- LAZY_LOADING: pages are fetched as items are reached and kept, so the list
  can be iterated and indexed any number of times.
- EAGER_LOADING: every page is fetched when the list is built.
- ITERATION_ONLY: one forward pass; pages are dropped once iterated, so
  len(), indexing, truthiness and a second iteration are not available.
"""

import logging
from collections.abc import Sequence
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from pydantic import BaseModel, Field

from ..config import PaginationLoadingStrategy
from ..exceptions import UnsupportedOperationError

logger = logging.getLogger(__name__)


class ResultPage(BaseModel):
    """One page of Query or Scan results."""

    results: List[Any] = Field(default_factory=list, description="Items converted to models")
    last_evaluated_key: Optional[Dict[str, Any]] = Field(None, description="Key to resume from, None on the last page")
    count: int = Field(0, description="Items returned after filtering")
    scanned_count: Optional[int] = Field(None, description="Items evaluated before filtering")
    consumed_capacity: Optional[Dict[str, Any]] = Field(None, description="ConsumedCapacity, when requested")

    @property
    def has_more(self) -> bool:
        return self.last_evaluated_key is not None


class QueryResultPage(ResultPage):
    """One page of Query results."""


class ScanResultPage(ResultPage):
    """One page of Scan results."""


PageFetcher = Callable[[Optional[Dict[str, Any]]], ResultPage]


class PaginatedList(Sequence):
    """Read-only sequence over all pages of a Query or Scan.

    Args:
        fetch_page: Callable taking an exclusive start key and returning the next ResultPage
        start_key: Exclusive start key of the first page
        strategy: How pages after the first one are fetched
    """

    def __init__(
        self,
        fetch_page: PageFetcher,
        start_key: Optional[Dict[str, Any]] = None,
        strategy: Union[PaginationLoadingStrategy, str] = PaginationLoadingStrategy.LAZY_LOADING
    ):
        self._fetch_page = fetch_page
        self.strategy = PaginationLoadingStrategy(strategy)
        self._loaded: List[Any] = []
        self._iterated = False

        first_page = fetch_page(start_key)
        self._next_key = first_page.last_evaluated_key
        self._loaded.extend(first_page.results)

        if self.strategy == PaginationLoadingStrategy.EAGER_LOADING:
            self.load_all_results()

    def _has_next_page(self) -> bool:
        return self._next_key is not None

    def _load_next_page(self) -> List[Any]:
        page = self._fetch_page(self._next_key)
        self._next_key = page.last_evaluated_key
        logger.debug(f"{type(self).__name__} fetched page with {len(page.results)} items")
        return list(page.results)

    def _require_random_access(self, operation: str) -> None:
        if self.strategy == PaginationLoadingStrategy.ITERATION_ONLY:
            raise UnsupportedOperationError(
                f"{operation} is not supported by an ITERATION_ONLY list",
                self.strategy.value
            )

    def _load_until(self, index: int) -> None:
        """Fetch pages until the item at index is loaded or no pages remain."""
        while len(self._loaded) <= index and self._has_next_page():
            self._loaded.extend(self._load_next_page())

    def load_all_results(self) -> None:
        """Fetch every remaining page."""
        self._require_random_access("load_all_results()")
        while self._has_next_page():
            self._loaded.extend(self._load_next_page())

    def __iter__(self) -> Iterator[Any]:
        if self.strategy == PaginationLoadingStrategy.ITERATION_ONLY:
            if self._iterated:
                raise UnsupportedOperationError(
                    "An ITERATION_ONLY list can only be iterated once",
                    self.strategy.value
                )
            self._iterated = True
            return self._iterate_once()
        return self._iterate_cached()

    def _iterate_cached(self) -> Iterator[Any]:
        index = 0
        while True:
            while index < len(self._loaded):
                yield self._loaded[index]
                index += 1
            if not self._has_next_page():
                return
            self._loaded.extend(self._load_next_page())

    def _iterate_once(self) -> Iterator[Any]:
        results, self._loaded = self._loaded, []
        while True:
            yield from results
            if not self._has_next_page():
                return
            results = self._load_next_page()

    def __len__(self) -> int:
        self._require_random_access("len()")
        self.load_all_results()
        return len(self._loaded)

    def __getitem__(self, index):
        self._require_random_access("Indexing")
        if isinstance(index, slice) or index < 0:
            self.load_all_results()
        else:
            self._load_until(index)
        return self._loaded[index]

    def __bool__(self) -> bool:
        self._require_random_access("Truth testing")
        self._load_until(0)
        return bool(self._loaded)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(strategy={self.strategy.value}, "
            f"loaded={len(self._loaded)}, more_pages={self._has_next_page()})"
        )


class PaginatedQueryList(PaginatedList):
    """All pages of a query, as returned by DynamoDBMapper.query()."""


class PaginatedScanList(PaginatedList):
    """All pages of a scan, as returned by DynamoDBMapper.scan()."""
