"""Routing error classes."""

from typing import Sequence


class ActionRouterError(ValueError):
    """Raised when an unsupported action is requested."""

    def __init__(self, message: str, *, allowed_actions: Sequence[str]) -> None:
        super().__init__(message)
        self.allowed_actions = tuple(allowed_actions)
