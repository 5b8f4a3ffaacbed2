"""Numerical building blocks -- Lambert W and vectorised bounded minimisation."""

from .lambertw import lambertw
from .fminbound import (
    EXIT_BAD_BOUNDS,
    EXIT_CONVERGED,
    EXIT_MAXITER,
    BoundedMinimizeResult,
    MinimizerOptions,
    fminbound_vec,
)

__all__ = [
    "lambertw",
    "EXIT_BAD_BOUNDS",
    "EXIT_CONVERGED",
    "EXIT_MAXITER",
    "BoundedMinimizeResult",
    "MinimizerOptions",
    "fminbound_vec",
]
