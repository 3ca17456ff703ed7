"""
test_batch.py

Tests for BatchMutator.

Validates:
- Every assignment is attempted, in order
- Failures are aggregated into one BatchUpdateError
- Successful assignments stay applied
- Unknown and invalid paths can be skipped on request
"""

import pytest

from propath import (
    AccessOptions,
    BatchMutator,
    BatchOutcome,
    BatchUpdateError,
    NotWritablePropertyError,
    PropertyAccessor,
    PropertyInvocationError,
    PropertyValue,
    TypeMismatchError,
)
from sample_beans import Customer, Person


@pytest.fixture
def mutator():
    return BatchMutator(PropertyAccessor())


class TestPartialFailure:
    """Failures are collected, not fatal."""

    def test_two_failures_one_success(self, mutator):
        person = Person()
        with pytest.raises(BatchUpdateError) as exc_info:
            mutator.apply_all(person, {"age": "foobar", "name": "tony", "touchy": ".valid"})

        err = exc_info.value
        assert err.failure_count == 2
        assert person.name == "tony"
        assert person.age == 0
        assert person.touchy is None

    def test_errors_by_path(self, mutator):
        with pytest.raises(BatchUpdateError) as exc_info:
            mutator.apply_all(Person(), {"age": "foobar", "name": "tony", "touchy": ".valid"})

        err = exc_info.value
        assert isinstance(err.error_for("age"), TypeMismatchError)
        assert err.error_for("age").value == "foobar"
        assert isinstance(err.error_for("touchy"), PropertyInvocationError)
        assert err.error_for("touchy").value == ".valid"
        assert err.error_for("name") is None

    def test_failures_carry_raw_values(self, mutator):
        with pytest.raises(BatchUpdateError) as exc_info:
            mutator.apply_all(Person(), {"age": "foobar", "touchy": ".valid"})
        assert [(f.path, f.value) for f in exc_info.value] == [
            ("age", "foobar"),
            ("touchy", ".valid"),
        ]

    def test_outcome_lists_every_result(self, mutator):
        with pytest.raises(BatchUpdateError) as exc_info:
            mutator.apply_all(Person(), [("age", "x"), ("name", "tony")])
        outcome = exc_info.value.outcome
        assert len(outcome) == 2
        assert outcome.result_for("name").ok
        assert not outcome.ok

    def test_message_lists_failed_paths(self, mutator):
        with pytest.raises(BatchUpdateError) as exc_info:
            mutator.apply_all(Person(), {"age": "foobar", "touchy": ".valid"})
        message = str(exc_info.value)
        assert "Failed properties (2)" in message
        assert "age" in message and "touchy" in message

    def test_unknown_property_is_a_failure(self, mutator):
        with pytest.raises(BatchUpdateError) as exc_info:
            mutator.apply_all(Person(), {"ag": 1})
        error = exc_info.value.error_for("ag")
        assert isinstance(error, NotWritablePropertyError)
        assert error.possible_matches == ("age",)


class TestOrdering:
    """Assignments apply in the order given."""

    def test_later_assignment_wins(self, mutator):
        person = Person()
        mutator.apply_all(person, [("name", "a"), ("name", "b")])
        assert person.name == "b"

    def test_earlier_assignment_is_visible(self, mutator):
        person = Person()
        spouse = Person()
        mutator.apply_all(person, [("spouse", spouse), ("spouse.name", "kerry")])
        assert person.spouse is spouse
        assert spouse.name == "kerry"

    def test_results_keep_order(self, mutator):
        outcome = mutator.apply_all(Person(), {"name": "a", "age": "1", "touchy": "x"})
        assert [r.path for r in outcome] == ["name", "age", "touchy"]


class TestSuccess:
    """Batches without failures."""

    def test_returns_outcome(self, mutator):
        person = Person()
        outcome = mutator.apply_all(person, {"name": "tony", "age": "42"})
        assert isinstance(outcome, BatchOutcome)
        assert outcome.ok
        assert outcome.failure_count == 0
        assert len(outcome.succeeded) == 2
        assert person.age == 42

    def test_property_values(self, mutator):
        person = Person()
        mutator.apply_all(person, [PropertyValue("name", "tony"), PropertyValue("age", 3)])
        assert (person.name, person.age) == ("tony", 3)

    def test_empty(self, mutator):
        assert len(mutator.apply_all(Person(), {})) == 0

    def test_default_accessor(self):
        person = Person()
        BatchMutator().apply_all(person, {"name": "tony"})
        assert person.name == "tony"

    def test_options(self, mutator):
        customer = Customer()
        mutator.apply_all(customer, {"address.city": "Oslo"}, options=AccessOptions(auto_grow=True))
        assert customer.address.city == "Oslo"


class TestIgnoring:
    """Skipping unknown and invalid paths."""

    def test_ignore_unknown(self, mutator):
        person = Person()
        outcome = mutator.apply_all(person, {"bogus": 1, "name": "x"}, ignore_unknown=True)
        assert person.name == "x"
        assert [r.path for r in outcome.skipped] == ["bogus"]
        assert outcome.ok

    def test_ignore_unknown_keeps_other_failures(self, mutator):
        with pytest.raises(BatchUpdateError) as exc_info:
            mutator.apply_all(Person(), {"bogus": 1, "age": "x"}, ignore_unknown=True)
        assert exc_info.value.failure_count == 1
        assert exc_info.value.error_for("bogus") is None

    def test_ignore_invalid(self, mutator):
        person = Person()
        outcome = mutator.apply_all(person, {"spouse.name": "x", "name": "y"}, ignore_invalid=True)
        assert person.spouse is None
        assert [r.path for r in outcome.skipped] == ["spouse.name"]

    def test_invalid_is_a_failure_by_default(self, mutator):
        with pytest.raises(BatchUpdateError):
            mutator.apply_all(Person(), {"spouse.name": "x"})

    def test_repr(self, mutator):
        outcome = mutator.apply_all(Person(), {"bogus": 1, "name": "x"}, ignore_unknown=True)
        assert repr(outcome) == "BatchOutcome(applied=1, skipped=1, failed=0)"
