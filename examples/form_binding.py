#!/usr/bin/env python3
"""
form_binding.py — Binding Submitted Form Fields
================================================

This example shows how a web handler would bind flat form fields onto a
nested domain object with propath.

Scenario:
    A customer edits their profile. The browser submits text fields keyed by
    property path. Some fields are valid, one has a typo in its name and one
    cannot be converted to the declared type.

Key Concepts:
    - Auto-growing absent nested objects (``address.city``)
    - Converting text to the declared property type
    - Collecting every failure instead of stopping at the first
    - Offering close matches for mistyped field names
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from propath import (
    AccessOptions,
    BatchMutator,
    BatchUpdateError,
    NotWritablePropertyError,
    PropertyAccessor,
)


@dataclass
class Address:
    street: str = ""
    city: str = ""
    zip_code: int = 0


@dataclass
class Profile:
    name: str = ""
    age: int = 0
    newsletter: bool = False
    address: Optional[Address] = None
    interests: List[str] = field(default_factory=list)
    preferences: Dict[str, str] = field(default_factory=dict)


def bind(profile: Profile, form: Dict[str, str]) -> None:
    """Bind ``form`` onto ``profile`` and report the outcome."""
    accessor = PropertyAccessor(options=AccessOptions(auto_grow=True))
    mutator = BatchMutator(accessor)

    try:
        outcome = mutator.apply_all(profile, form)
    except BatchUpdateError as e:
        print(f"\n[REJECTED FIELDS] ({e.failure_count})")
        for failure in e:
            print(f"  {failure.path} = {failure.value!r}")
            print(f"    {failure.error.message}")
            if isinstance(failure.error, NotWritablePropertyError) and failure.error.possible_matches:
                print(f"    did you mean: {', '.join(failure.error.possible_matches)}")
        outcome = e.outcome

    print(f"\n[APPLIED] {len(outcome.succeeded)} of {len(outcome)} fields")
    for result in outcome.succeeded:
        print(f"  {result.path} -> {result.change.new_value!r}")


def main():
    logging.basicConfig(level=logging.INFO)

    profile = Profile()
    form = {
        "name": "Tony",
        "age": "forty",
        "newsletter": "yes",
        "address.city": "Oslo",
        "address.zip_code": "0150",
        "interests": "chess, climbing",
        "preferences['ui.theme']": "dark",
        "address.stret": "Karl Johans gate 1",
    }

    print("=" * 60)
    print("Binding profile form")
    print("=" * 60)
    bind(profile, form)

    print(f"\n[RESULT]\n  {profile}")


if __name__ == "__main__":
    main()
