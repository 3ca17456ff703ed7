"""
propath — Property Path Access
==============================

propath reads, converts and writes values in arbitrary object graphs through
string paths such as ``"spouse.name"`` or ``"settings['log.level']"``.

Stability Guarantees (v1.x)
---------------------------
All symbols exported from this module are part of the **public API**
and follow semantic versioning.

What's Public
-------------
Everything exported in ``__all__`` is public and stable:

- **Access**: PropertyAccessor, AccessOptions, PropertyDescriptor
- **Batch updates**: BatchMutator, BatchOutcome, PropertyValue
- **Paths**: parse_path, PropertyPath and its segments
- **Collaborators**: capability registry, type converter, meta-property
  policy, single-value containers
- **Exceptions**: the PropertyAccessError hierarchy

Logging
-------
Modules log at DEBUG level under the ``propath`` logger. The package only
installs a ``NullHandler``; configuring output is left to the application.

Example
-------
::

    from propath import PropertyAccessor, BatchMutator, AccessOptions

    accessor = PropertyAccessor(options=AccessOptions(auto_grow=True))
    accessor.set_value(order, "customer.address.city", "Oslo")
    accessor.get_value(order, "customer.address.city")

    BatchMutator(accessor).apply_all(order, {"quantity": "3", "note": "gift"})
"""

import logging

__version__ = "1.0.0"

# =============================================================================
# PUBLIC API — All symbols below are stable for v1.x
# =============================================================================

__all__ = [
    # --- Package Metadata ---
    "__version__",

    # --- Access ---
    "PropertyAccessor",
    "AccessOptions",
    "PropertyDescriptor",
    "PropertyChange",
    "PropertyResult",

    # --- Batch ---
    "BatchMutator",
    "BatchOutcome",
    "PropertyValue",

    # --- Paths ---
    "parse_path",
    "PathParser",
    "PropertyPath",
    "NameSegment",
    "KeySegment",

    # --- Collaborators ---
    "CapabilityRegistry",
    "CapabilityDescriptor",
    "IntrospectingRegistry",
    "TypeConverter",
    "ConversionOutcome",
    "MetaPropertyPolicy",
    "ContainerRegistry",
    "Holder",
    "suggest",
    "levenshtein",

    # --- Exceptions ---
    "PropertyAccessError",
    "MalformedPathError",
    "InvalidPropertyError",
    "NotReadablePropertyError",
    "NotWritablePropertyError",
    "NullValueInNestedPathError",
    "AutoGrowFailedError",
    "TypeMismatchError",
    "PropertyInvocationError",
    "ConstructionError",
    "BatchUpdateError",
    "format_error_for_user",
]

# =============================================================================
# IMPORTS
# =============================================================================

from propath.accessor import (
    AccessOptions,
    PropertyAccessor,
    PropertyChange,
    PropertyDescriptor,
    PropertyResult,
)
from propath.batch import BatchMutator, BatchOutcome, PropertyValue
from propath.containers import ContainerRegistry, Holder
from propath.conversion import ConversionOutcome, TypeConverter
from propath.errors import (
    AutoGrowFailedError,
    BatchUpdateError,
    ConstructionError,
    InvalidPropertyError,
    MalformedPathError,
    NotReadablePropertyError,
    NotWritablePropertyError,
    NullValueInNestedPathError,
    PropertyAccessError,
    PropertyInvocationError,
    TypeMismatchError,
    format_error_for_user,
)
from propath.meta import MetaPropertyPolicy
from propath.path import KeySegment, NameSegment, PathParser, PropertyPath, parse_path
from propath.registry import CapabilityDescriptor, CapabilityRegistry, IntrospectingRegistry
from propath.suggestions import levenshtein, suggest

logging.getLogger(__name__).addHandler(logging.NullHandler())
