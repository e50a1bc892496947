"""
Median Estimator

Full-sort median of an unordered sequence of real numbers. Used by every
resampling trial, so it must never touch the caller's buffer.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np


def median(values: Union[Sequence[float], np.ndarray]) -> float:
    """
    Return the median of ``values``.

    The input is copied into a private float64 array before sorting, so the
    caller's sequence keeps its original ordering.

    Parameters
    ----------
    values : array-like of shape (n,)
        Real numbers in any order.

    Returns
    -------
    float
        - 0.0 when ``values`` is empty (degenerate policy, not an error)
        - the middle element when n is odd
        - the mean of the two middle elements when n is even

    Raises
    ------
    ValueError
        If ``values`` is not one-dimensional.

    Examples
    --------
    >>> median([3, 1, 2])
    2.0
    >>> median([4, 1, 3, 2])
    2.5
    """
    sorted_values = np.array(values, dtype=np.float64)
    if sorted_values.ndim != 1:
        raise ValueError(
            f"median expects a 1D sequence, got shape {sorted_values.shape}"
        )

    n = len(sorted_values)
    if n == 0:
        return 0.0

    sorted_values.sort()
    mid = n // 2
    if n % 2 == 0:
        return float((sorted_values[mid - 1] + sorted_values[mid]) / 2.0)
    return float(sorted_values[mid])
