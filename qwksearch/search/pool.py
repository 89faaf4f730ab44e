"""Candidate search backends and instance selection."""
from __future__ import annotations

import random
from collections.abc import Collection, Sequence


class InstancePool:
    """Hold public mirror hostnames and pick one per attempt.

    Selection is uniform and memoryless by default, so a failing mirror can be
    drawn again on the next retry. ``non_repeating`` excludes hosts already
    tried in the current query while any untried host remains.
    """

    def __init__(
        self,
        instances: Sequence[str],
        *,
        non_repeating: bool = False,
        rng: random.Random | None = None,
    ) -> None:
        self._instances = tuple(instance for instance in instances if instance)
        self._non_repeating = non_repeating
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self._instances)

    @property
    def instances(self) -> tuple[str, ...]:
        return self._instances

    def choose(self, pinned: str | None = None, *, tried: Collection[str] = ()) -> str:
        if pinned:
            return pinned
        if not self._instances:
            raise LookupError("Instance pool is empty")
        candidates: Sequence[str] = self._instances
        if self._non_repeating and tried:
            untried = [instance for instance in self._instances if instance not in tried]
            candidates = untried or self._instances
        return self._rng.choice(candidates)


__all__ = ["InstancePool"]
