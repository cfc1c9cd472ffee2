"""Collects install outcomes in input order."""

from __future__ import annotations

from secure_installer.types import InstallOutcome


class ResultAggregator:
    """Ordered collection of outcomes, one slot per input request.

    Slots are keyed by input position rather than identifier, so duplicate
    identifiers in the input each get their own outcome.
    """

    def __init__(self, expected: int) -> None:
        """Initialize with one empty slot per request.

        Args:
            expected: Number of requests in the batch.
        """
        if expected < 0:
            raise ValueError("expected must be >= 0")
        self._slots: list[InstallOutcome | None] = [None] * expected

    def record(self, position: int, outcome: InstallOutcome) -> None:
        """Store the outcome for the request at ``position``.

        Raises:
            IndexError: If position is outside the batch.
            ValueError: If the position already has an outcome.
        """
        if not 0 <= position < len(self._slots):
            raise IndexError(f"position {position} outside batch of {len(self._slots)}")
        if self._slots[position] is not None:
            raise ValueError(f"outcome for position {position} already recorded")
        self._slots[position] = outcome

    @property
    def complete(self) -> bool:
        """True once every request has an outcome."""
        return all(slot is not None for slot in self._slots)

    @property
    def outcomes(self) -> list[InstallOutcome]:
        """Recorded outcomes in input order.

        Raises:
            RuntimeError: If any request has no outcome yet.
        """
        missing = [i for i, slot in enumerate(self._slots) if slot is None]
        if missing:
            raise RuntimeError(f"no outcome recorded for positions {missing}")
        return [slot for slot in self._slots if slot is not None]

    @property
    def failed(self) -> list[InstallOutcome]:
        """Recorded outcomes that did not succeed."""
        return [slot for slot in self._slots if slot is not None and not slot.success]

    @property
    def all_succeeded(self) -> bool:
        """True if every request has a successful outcome."""
        return self.complete and not self.failed

    def __len__(self) -> int:
        return len(self._slots)
