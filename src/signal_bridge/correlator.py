"""
Request id allocation and response correlation.
"""

from typing import Any, Optional


class RequestCorrelator:
    """Hands out request ids and remembers what each in-flight request was for.

    Ids start at 1 and are never reused by the same instance, even across
    reset(). Only the in-flight map is cleared on reset.
    """

    def __init__(self) -> None:
        self._last_id = 0
        self._contexts: dict[int, Any] = {}

    @property
    def pending(self) -> int:
        return len(self._contexts)

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._contexts

    def next_id(self) -> int:
        self._last_id += 1
        return self._last_id

    def register(self, request_id: int, context: Any) -> None:
        self._contexts[request_id] = context

    def resolve(self, request_id: Any) -> Optional[Any]:
        """Pop the context for a response id. Unknown ids resolve to None."""
        if request_id is None:
            return None
        return self._contexts.pop(request_id, None)

    def reset(self) -> None:
        self._contexts.clear()
