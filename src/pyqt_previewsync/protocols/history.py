"""History protocol for query string persistence.

The editor mirrors its state into a shareable query string. Where that query
string lives (a browser location bar bridged over a web channel, a settings
file, a test double) is up to the application.
"""

from typing import Protocol, List


class HistoryBackend(Protocol):
    """Protocol for the location whose query string mirrors editor state."""

    def current_query(self) -> str:
        """Return the current query string, without the leading '?'."""
        ...

    def replace_query(self, query: str) -> None:
        """Replace the current history entry's query string in place."""
        ...


class InMemoryHistory:
    """History backend that keeps entries in a list.

    ``replace_query`` rewrites the last entry, so ``len(entries)`` only grows
    through ``push_query`` (navigation), never through editor synchronization.
    """

    def __init__(self, query: str = ""):
        self.entries: List[str] = [query.lstrip("?")]

    def current_query(self) -> str:
        return self.entries[-1]

    def replace_query(self, query: str) -> None:
        self.entries[-1] = query

    def push_query(self, query: str) -> None:
        self.entries.append(query.lstrip("?"))

    def __len__(self) -> int:
        return len(self.entries)
