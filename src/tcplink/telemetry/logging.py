"""No-op logger used when a client's diagnostic output is switched off."""

from typing import Any


class NoOpLogger:
    """Accepts the structlog logging calls and discards them."""

    def __init__(self, name: str = ""):
        self.name = name

    def debug(self, event: str, **kwargs: Any) -> None:
        pass

    def info(self, event: str, **kwargs: Any) -> None:
        pass

    def warning(self, event: str, **kwargs: Any) -> None:
        pass

    def error(self, event: str, **kwargs: Any) -> None:
        pass
