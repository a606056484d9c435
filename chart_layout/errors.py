from __future__ import annotations


class ChartLayoutError(Exception):
    """Base error for chart layout contract violations."""


class ScaleDomainError(ChartLayoutError, ValueError):
    pass


class CategoryNotFoundError(ChartLayoutError, KeyError):
    def __init__(self, value: object) -> None:
        super().__init__(value)
        self.value = value

    def __str__(self) -> str:
        return f"value {self.value!r} is not part of the ordinal domain"


class TickGeneratorNotFoundError(ChartLayoutError, LookupError):
    pass


class ScaleMismatchError(ChartLayoutError, TypeError):
    pass


class CompositionError(ChartLayoutError, ValueError):
    pass
