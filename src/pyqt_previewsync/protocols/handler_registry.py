"""Handler registry for schema-declared option resolvers.

The schema names its handlers by string. The schema loader binds each name
to a callable once at startup; the resolver performs a single lookup per
invocation and never dispatches on strings beyond that.
"""

from typing import Protocol, Optional, Callable, Dict, List, Sequence, Any
import logging

logger = logging.getLogger(__name__)


class HandlerFunction(Protocol):
    """Callable that computes the dynamic option list for a field.

    Runs on a background thread. Returns an ordered sequence of options, either
    HandlerOption instances or mappings with ``value`` and ``display`` keys.
    """

    def __call__(self, field_id: str, serialized_value: str) -> Sequence[Any]:
        ...


class HandlerRegistry:
    """Mapping from handler name to handler function.

    Example:
        registry = HandlerRegistry()
        registry.register("get_stations", client_handler)
        handler = registry.get("get_stations")
    """

    def __init__(self, handlers: Optional[Dict[str, HandlerFunction]] = None):
        self._handlers: Dict[str, HandlerFunction] = dict(handlers or {})

    def register(self, name: str, handler: HandlerFunction) -> None:
        """Bind a handler name to an implementation, replacing any previous one."""
        if not name:
            raise ValueError("Handler name must be a non-empty string")
        if name in self._handlers:
            logger.debug(f"Rebinding handler '{name}'")
        self._handlers[name] = handler

    def unregister(self, name: str) -> None:
        self._handlers.pop(name, None)

    def get(self, name: str) -> Optional[Callable[[str, str], Sequence[Any]]]:
        """Get handler by name.

        Args:
            name: Handler name declared by the schema

        Returns:
            Handler callable if bound, None otherwise
        """
        return self._handlers.get(name)

    def names(self) -> List[str]:
        return sorted(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
