"""
Keyset pagination over a monotonically increasing integer key.

Both population passes walk tables far too large to load at once. The
scanner asks for rows with a key strictly greater than the last key seen,
ordered by key, a page at a time, so a run can be stopped and restarted from
any cursor value and rows appended during the run are still reached.
"""

import logging
from typing import Any, Callable, Iterator, Optional

import pandas as pd

from user_table.exceptions import CursorStalledError

logger = logging.getLogger(__name__)

# fetch_page(after, limit) -> rows with key > after (no lower bound when None)
PageFetcher = Callable[[Optional[int], int], pd.DataFrame]


class BatchedCursorScanner:
    """
    Lazily pages through a relation ordered by an integer key.

    The cursor only moves forward, and only once a page has been fully
    handed to the consumer. Every row with a key above the starting cursor is
    visited exactly once, in ascending key order, whatever the page size.
    """

    def __init__(self, fetch_page: PageFetcher, key_column: str, batch_size: int,
                 start_after: Optional[int] = None):
        """
        Args:
            fetch_page: Callable returning the next page as a DataFrame
            key_column: Name of the key column in the returned frames
            batch_size: Maximum number of rows per page
            start_after: Starting cursor; None starts below every row
        """
        if batch_size <= 0:
            raise ValueError("batch_size must be > 0")
        self.fetch_page = fetch_page
        self.key_column = key_column
        self.batch_size = batch_size
        self.cursor = start_after
        self.pages_fetched = 0
        self.rows_fetched = 0

    def pages(self) -> Iterator[pd.DataFrame]:
        """Yield pages until the relation is exhausted."""
        while True:
            page = self.fetch_page(self.cursor, self.batch_size)
            if page is None or page.empty:
                logger.debug(f"Scan on {self.key_column} finished at cursor {self.cursor}")
                return

            self.pages_fetched += 1
            self.rows_fetched += len(page)
            next_cursor = self._max_key(page)
            if self.cursor is not None and next_cursor <= self.cursor:
                raise CursorStalledError(
                    f"Page on {self.key_column} did not advance past cursor {self.cursor}"
                )

            yield page

            self.cursor = next_cursor

    def __iter__(self) -> Iterator[Any]:
        """Yield rows as named tuples, in key order."""
        for page in self.pages():
            yield from page.itertuples(index=False, name='Row')

    def _max_key(self, page: pd.DataFrame) -> int:
        if self.key_column not in page.columns:
            raise KeyError(f"Page is missing key column '{self.key_column}'")
        return int(page[self.key_column].max())
