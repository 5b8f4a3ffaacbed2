"""Array input checks shared by the solar model functions.

Model functions accept scalars or 1-D vectors for each physical input.
Every vector in a call must have the same length N; scalars broadcast
to N.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pvcurve.core.errors import InputDomainError, InputShapeError


def as_vector(name: str, value: Any) -> NDArray[np.float64]:
    """Return *value* as a flat float64 array, rejecting non-vectors.

    Row and column vectors are both accepted (at most one dimension
    longer than 1), mirroring how measured series usually arrive.
    """
    arr = np.asarray(value)
    if arr.dtype.kind not in "iuf":
        raise InputShapeError(f"{name} must be numeric, got dtype {arr.dtype}")
    if arr.size == 0:
        raise InputShapeError(f"{name} must not be empty")
    if sum(dim > 1 for dim in arr.shape) > 1:
        raise InputShapeError(
            f"{name} must be a scalar or a vector, got shape {arr.shape}"
        )
    return arr.astype(np.float64).ravel()


def broadcast_vectors(**vectors: NDArray[np.float64]) -> list[NDArray[np.float64]]:
    """Broadcast length-1 vectors to the common length of the others.

    Raises
    ------
    InputShapeError
        If any vector has a length other than 1 or the maximum length.
    """
    sizes = {name: vec.size for name, vec in vectors.items()}
    n = max(sizes.values())
    if not all(size in (1, n) for size in sizes.values()):
        names = ", ".join(sizes)
        got = ", ".join(f"{name}={size}" for name, size in sizes.items())
        raise InputShapeError(
            f"Input vectors {names} must either be scalars or vectors of "
            f"the same length (got lengths {got})"
        )
    return [np.broadcast_to(vec, (n,)).copy() for vec in vectors.values()]


def require(name: str, ok: NDArray[np.bool_] | bool, requirement: str) -> None:
    """Raise :class:`InputDomainError` unless every element of *ok* holds."""
    if not np.all(ok):
        raise InputDomainError(f"{name} must be {requirement}")
