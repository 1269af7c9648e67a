"""Fluent interface base class for method chaining."""

from typing import TypeVar, Generic

T = TypeVar("T")


class FluentBuilder(Generic[T]):
    """
    Base class for fluent builders that return self for method chaining.

    Example usage:
        class TimeoutsBuilder(FluentBuilder["TimeoutsBuilder"]):
            def __init__(self):
                super().__init__()
                self._probe = 5.0

            def probe(self, seconds: float) -> "TimeoutsBuilder":
                self._check_not_built()
                self._probe = seconds
                return self

            def build(self) -> float:
                self._mark_built()
                return self._probe
    """

    def __init__(self) -> None:
        self._built = False

    def _check_not_built(self) -> None:
        """Raise an error if build() has already been called."""
        if self._built:
            raise RuntimeError("Builder has already been used to build an object")

    def _mark_built(self) -> None:
        """Mark this builder as having been used."""
        self._built = True
