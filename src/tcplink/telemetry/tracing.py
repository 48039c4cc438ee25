"""
No-op span for when tracing is disabled.
"""

from typing import Any, Dict, Optional


class NoOpSpan:
    """No-op implementation of a span."""

    def __init__(self, name: str = "", attributes: Optional[Dict[str, Any]] = None):
        """
        Initialize a new no-op span.

        Args:
            name: The name of the span
            attributes: Optional attributes to set on the span
        """
        self.name = name
        self.attributes = dict(attributes or {})

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def record_exception(self, exception: BaseException) -> None:
        pass
