from __future__ import annotations

from collections.abc import Iterable


class AnalyticsError(Exception):
    pass


class InsufficientInputError(AnalyticsError):
    def __init__(self, supplied: int, required: int = 2) -> None:
        super().__init__(f"At least {required} strategies are required for comparison, got {supplied}")
        self.supplied = supplied
        self.required = required


class NotFoundError(AnalyticsError):
    def __init__(self, strategy_ids: Iterable[str]) -> None:
        self.strategy_ids = list(strategy_ids)
        super().__init__(f"Strategies not found or not accessible: {', '.join(self.strategy_ids)}")
