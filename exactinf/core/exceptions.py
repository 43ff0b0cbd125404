"""
exactinf/core/exceptions.py

Error kinds raised across the package.

Every error derives from ExactInfError and from the closest builtin, so
callers can catch either the package-specific class or the generic one.
"""

from __future__ import annotations


class ExactInfError(Exception):
    """Base class for exactinf-specific exceptions."""


class PreconditionViolation(ExactInfError, AssertionError):
    """A caller broke a documented precondition (e.g. index out of range)."""


class UnknownProperty(ExactInfError, KeyError):
    """A property is missing or cannot be coerced to the requested kind."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""


class MalformedProperty(ExactInfError, ValueError):
    """Property text is not of the form [key=value,...]."""


class NotImplementedFeature(ExactInfError, NotImplementedError):
    """An inference algorithm does not provide this capability."""


class InvalidModel(ExactInfError, ArithmeticError):
    """The model has zero (or non-finite) total mass."""


class ObjectNotFound(ExactInfError, LookupError):
    """A variable, factor or algorithm name is unknown."""


class BeliefNotAvailable(ExactInfError, LookupError):
    """The requested belief is not materialized by this algorithm."""
