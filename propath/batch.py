"""
batch.py

BatchMutator — applies many property assignments, collecting every failure.

Assignments are applied strictly in the order given. A failure never stops
the batch: later assignments are still applied, and earlier successful ones
are not rolled back. When anything failed, a single BatchUpdateError carries
the full outcome.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from propath.accessor import AccessOptions, PropertyAccessor, PropertyResult
from propath.errors import (
    BatchUpdateError,
    NotWritablePropertyError,
    NullValueInNestedPathError,
    PropertyAccessError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PropertyValue:
    """A single ``path = value`` assignment."""
    path: str
    value: Any


Assignments = Union[
    Mapping[str, Any],
    Iterable[PropertyValue],
    Iterable[Tuple[str, Any]],
]


class BatchOutcome:
    """Ordered results of a batch update."""

    __slots__ = ("_results",)

    def __init__(self, results: Iterable[PropertyResult]):
        self._results: Tuple[PropertyResult, ...] = tuple(results)

    @property
    def results(self) -> Tuple[PropertyResult, ...]:
        return self._results

    @property
    def failures(self) -> List[PropertyResult]:
        return [r for r in self._results if not r.ok]

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def succeeded(self) -> List[PropertyResult]:
        return [r for r in self._results if r.ok and not r.skipped]

    @property
    def skipped(self) -> List[PropertyResult]:
        return [r for r in self._results if r.skipped]

    @property
    def ok(self) -> bool:
        return self.failure_count == 0

    def result_for(self, path: str) -> Optional[PropertyResult]:
        for result in self._results:
            if result.path == path:
                return result
        return None

    def __iter__(self) -> Iterator[PropertyResult]:
        return iter(self._results)

    def __len__(self) -> int:
        return len(self._results)

    def __repr__(self) -> str:
        return (
            f"BatchOutcome(applied={len(self.succeeded)}, "
            f"skipped={len(self.skipped)}, failed={self.failure_count})"
        )


def _iter_assignments(assignments: Assignments) -> Iterator[PropertyValue]:
    if isinstance(assignments, Mapping):
        for path, value in assignments.items():
            yield PropertyValue(path, value)
        return

    for item in assignments:
        if isinstance(item, PropertyValue):
            yield item
        else:
            path, value = item
            yield PropertyValue(path, value)


class BatchMutator:
    """
    Thin driver over repeated ``PropertyAccessor.try_set_value`` calls.

    Example::

        mutator = BatchMutator(PropertyAccessor())
        try:
            mutator.apply_all(form, {"age": "42", "name": "Tony"})
        except BatchUpdateError as e:
            for failure in e.failures:
                print(failure.path, failure.value, failure.error)
    """

    def __init__(self, accessor: Optional[PropertyAccessor] = None):
        self.accessor = accessor or PropertyAccessor()

    def apply_all(
        self,
        root: Any,
        assignments: Assignments,
        *,
        ignore_unknown: bool = False,
        ignore_invalid: bool = False,
        options: Optional[AccessOptions] = None,
    ) -> BatchOutcome:
        """
        Apply every assignment to ``root`` in order.

        Args:
            root: Object the paths start from
            assignments: Mapping, ``(path, value)`` pairs or PropertyValues
            ignore_unknown: Skip unknown or read-only properties instead of
                            recording them as failures
            ignore_invalid: Skip paths whose intermediate value is absent
            options: AccessOptions for every assignment

        Returns:
            BatchOutcome when no assignment failed

        Raises:
            BatchUpdateError: If one or more assignments failed; successful
                              assignments stay applied
        """
        results = []
        for assignment in _iter_assignments(assignments):
            result = self.accessor.try_set_value(root, assignment.path, assignment.value, options)
            if not result.ok and self._ignored(result.error, ignore_unknown, ignore_invalid):
                result = PropertyResult(
                    path=result.path, value=result.value, skipped=True,
                )
            results.append(result)

        outcome = BatchOutcome(results)
        logger.debug("Batch update on %s: %r", type(root).__name__, outcome)
        if not outcome.ok:
            raise BatchUpdateError(outcome)
        return outcome

    @staticmethod
    def _ignored(error: PropertyAccessError, ignore_unknown: bool, ignore_invalid: bool) -> bool:
        if ignore_unknown and isinstance(error, NotWritablePropertyError):
            return True
        if ignore_invalid and isinstance(error, NullValueInNestedPathError):
            return True
        return False
