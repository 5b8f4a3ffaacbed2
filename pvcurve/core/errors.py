"""Exception hierarchy for pvcurve input validation.

Both concrete errors subclass :class:`ValueError` so callers that guard
numerical code with ``except ValueError`` keep working.
"""

from __future__ import annotations


class PVCurveError(Exception):
    """Base class for all errors raised by pvcurve."""


class InputShapeError(PVCurveError, ValueError):
    """Array inputs disagree in length, are not vectors, or are not numeric."""


class InputDomainError(PVCurveError, ValueError):
    """An input value lies outside the physically allowed range."""
