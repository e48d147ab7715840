"""
Index arithmetic, combination helpers and sample preparation.

Histograms and their marginals are stored as flat, row-major (C-contiguous)
buffers. The helpers here convert between flat positions and per-axis
indices with explicit stride arithmetic, enumerate agent combinations, and
build lagged sample matrices from time series.
"""

from itertools import combinations
from typing import Iterable, List, Sequence, Tuple, Union
import numpy as np
from numpy.typing import ArrayLike

__all__ = [
    "Combination",
    "row_major_strides",
    "ravel_multi_index",
    "unravel_index",
    "union_indices",
    "combination_key",
    "generate_combinations",
    "create_lagged_samples",
]

# A canonically sorted tuple of agent axes, e.g. (1, 3).
Combination = Tuple[int, ...]


def row_major_strides(shape: Sequence[int]) -> np.ndarray:
    """Compute row-major strides for a shape.

    The last axis has stride 1 and each axis to its left strides over the
    product of the sizes to its right.

    Parameters
    ----------
    shape : sequence of int
        Size of each axis.

    Returns
    -------
    ndarray of int
        Stride of each axis, in elements.

    Examples
    --------
    >>> row_major_strides([2, 3, 4])
    array([12,  4,  1])
    """
    strides = np.ones(len(shape), dtype=np.intp)
    stride = 1
    for axis in range(len(shape) - 1, -1, -1):
        strides[axis] = stride
        stride *= int(shape[axis])
    return strides


def ravel_multi_index(
    multi_index: ArrayLike,
    shape: Sequence[int],
) -> Union[int, np.ndarray]:
    """Convert per-axis indices to flat row-major indices.

    Parameters
    ----------
    multi_index : array-like of shape (ndim,) or (n, ndim)
        One index per axis, or one such row per point.
    shape : sequence of int
        Size of each axis.

    Returns
    -------
    int or ndarray
        Flat index (or indices for 2-D input).

    Raises
    ------
    ValueError
        If the index has the wrong number of axes or is out of bounds.
    """
    idx = np.asarray(multi_index, dtype=np.intp)
    dims = np.asarray(shape, dtype=np.intp)

    if idx.shape[-1:] != dims.shape:
        raise ValueError(
            f"index has {idx.shape[-1] if idx.ndim else 0} axes, shape has {len(dims)}"
        )
    if np.any(idx < 0) or np.any(idx >= dims):
        raise ValueError(f"index {idx.tolist()} out of bounds for shape {list(shape)}")

    flat = idx @ row_major_strides(shape)
    return int(flat) if idx.ndim == 1 else flat


def unravel_index(flat_index: int, shape: Sequence[int]) -> Tuple[int, ...]:
    """Convert a flat row-major index back to per-axis indices.

    Parameters
    ----------
    flat_index : int
        Position in the flattened buffer.
    shape : sequence of int
        Size of each axis.

    Returns
    -------
    tuple of int
        Index along each axis.

    Raises
    ------
    ValueError
        If `flat_index` is outside ``[0, prod(shape))``.
    """
    size = int(np.prod(shape, dtype=np.int64))
    if not 0 <= flat_index < size:
        raise ValueError(f"flat index {flat_index} out of bounds for size {size}")

    multi_index = [0] * len(shape)
    remainder = int(flat_index)
    for axis in range(len(shape) - 1, -1, -1):
        multi_index[axis] = remainder % shape[axis]
        remainder //= shape[axis]
    return tuple(multi_index)


def union_indices(a: Iterable[int], b: Iterable[int]) -> List[int]:
    """Ordered union of two index lists, first occurrence wins.

    >>> union_indices([0, 2], [2, 1, 0])
    [0, 2, 1]
    """
    seen = set()
    result = []
    for idx in list(a) + list(b):
        if idx not in seen:
            seen.add(idx)
            result.append(idx)
    return result


def combination_key(indices: Iterable[int]) -> Combination:
    """Canonical key for a set of agent axes.

    Parameters
    ----------
    indices : iterable of int
        Agent axes in any order.

    Returns
    -------
    tuple of int
        Sorted, duplicate-free tuple.

    Raises
    ------
    ValueError
        If `indices` is empty.
    """
    key = tuple(sorted(set(int(i) for i in indices)))
    if not key:
        raise ValueError("combination must contain at least one agent")
    return key


def generate_combinations(n_agents: int) -> List[Combination]:
    """Enumerate every non-empty subset of agents ``1..n_agents``.

    Subsets are ordered by size, then lexicographically, so there are
    exactly ``2**n_agents - 1`` of them.

    Examples
    --------
    >>> generate_combinations(3)
    [(1,), (2,), (3,), (1, 2), (1, 3), (2, 3), (1, 2, 3)]
    """
    if n_agents < 1:
        raise ValueError(f"n_agents must be at least 1, got {n_agents}")

    agents = range(1, n_agents + 1)
    return [
        comb
        for length in range(1, n_agents + 1)
        for comb in combinations(agents, length)
    ]


def create_lagged_samples(
    target: ArrayLike,
    agents: Sequence[ArrayLike],
    lag: int = 1,
) -> np.ndarray:
    """Build a sample matrix pairing future target states with present agents.

    Row ``i`` is ``[target[i + lag], agents[0][i], ..., agents[k-1][i]]``,
    so column 0 is the target and columns 1..k are the agents expected by
    :func:`causalsurd.decompose_from_data`.

    Parameters
    ----------
    target : array-like of shape (n,)
        Target time series.
    agents : sequence of array-like of shape (n,)
        Agent time series. The target series may be among them.
    lag : int, default=1
        Time steps between agent observation and target response.

    Returns
    -------
    ndarray of shape (n - lag, k + 1)
        Sample matrix.

    Raises
    ------
    ValueError
        If series lengths differ, no agents are given, or `lag` is not in
        ``[1, n)``.

    Examples
    --------
    >>> q = np.array([0., 1., 1., 0.])
    >>> create_lagged_samples(q, [q], lag=1)
    array([[1., 0.],
           [1., 1.],
           [0., 1.]])
    """
    target = np.asarray(target, dtype=float).flatten()
    agents = [np.asarray(a, dtype=float).flatten() for a in agents]

    if not agents:
        raise ValueError("at least one agent series is required")
    n = len(target)
    for i, agent in enumerate(agents):
        if len(agent) != n:
            raise ValueError(
                f"agent {i + 1} must have same length as target: {len(agent)} vs {n}"
            )
    if lag < 1 or lag >= n:
        raise ValueError(f"lag must be in [1, {n}), got {lag}")

    return np.column_stack([target[lag:]] + [agent[:-lag] for agent in agents])
