"""
Error taxonomy for the recommendation trend engine.

Three failure kinds reach callers:

  - ``InvalidEventError``     — an event breaks the data-model invariants
    (confidence outside [0, 100], position < 1, empty ids, ...). Raised
    before anything is written, so the store never holds invalid data.
  - ``UnknownRangeError``     — a window token that is not one of
    ``24h`` / ``7d`` / ``30d`` / ``all``.
  - ``StoreUnavailableError`` — the persistence medium failed on append or
    read. The original exception is chained as ``__cause__``.

Nothing in the core retries; retry policy belongs to the host.
"""

from __future__ import annotations

from collections.abc import Iterable


class InvalidEventError(ValueError):
    """Raised when one or more recommendation events violate invariants.

    Attributes:
        problems: Human-readable description of each violation.
    """

    def __init__(self, problems: Iterable[str]) -> None:
        self.problems = list(problems)
        max_shown = 10
        detail = "\n".join(f"  {p}" for p in self.problems[:max_shown])
        suffix = (
            f"\n  … and {len(self.problems) - max_shown} more"
            if len(self.problems) > max_shown
            else ""
        )
        super().__init__(
            f"{len(self.problems)} invalid recommendation event(s):\n{detail}{suffix}"
        )


class UnknownRangeError(ValueError):
    """Raised when a time-range token is not recognized.

    Attributes:
        token: The offending token as supplied by the caller.
    """

    def __init__(self, token: object, valid: Iterable[str]) -> None:
        self.token = token
        super().__init__(
            f"Unknown time range {token!r}. Must be one of {sorted(valid)}."
        )


class StoreUnavailableError(RuntimeError):
    """Raised when the event store's persistence medium fails.

    Attributes:
        operation: ``"append"``, ``"read"`` or ``"open"``.
    """

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        super().__init__(f"Event store unavailable during {operation}: {detail}")
