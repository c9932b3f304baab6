"""
Exceptions raised by the gravassist solvers.
"""


class GravAssistError(Exception):
    """Base class for all gravassist errors."""


class DomainError(GravAssistError, ValueError):
    """
    A physically inconsistent input combination.

    Raised when a square root, arcsine or arccosine would be evaluated
    outside of its valid range, so the computation stops before a NaN
    can propagate into later comparisons.
    """


class ConfigurationError(GravAssistError, ValueError):
    """An invalid solver or integrator setting, rejected before any iteration."""
