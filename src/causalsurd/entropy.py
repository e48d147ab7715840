"""
Shannon entropy and related measures over discrete joint distributions.

Every function takes an N-dimensional probability array (a numpy array, or a
:class:`~causalsurd.histogram.Histogram`) and a list of axes. Measures over a
subset of variables are obtained by summing out the remaining axes first.
All results are in bits.

Logarithms go through :func:`safe_log2`, which maps non-positive and
non-finite inputs to 0 so that ``0 * log(0) = 0`` holds by construction.
"""

from typing import Iterable, List, Optional, Sequence, Union
import numpy as np
from numpy.typing import ArrayLike
from scipy.special import entr

from causalsurd.histogram import Histogram
from causalsurd.utils import union_indices

__all__ = [
    "safe_log2",
    "entropy",
    "as_joint",
    "marginalize",
    "joint_entropy",
    "conditional_entropy",
    "mutual_information",
    "conditional_mutual_information",
    "union_indices",
]

_LN2 = np.log(2.0)

JointLike = Union[ArrayLike, Histogram]


def safe_log2(x: ArrayLike) -> Union[float, np.ndarray]:
    """Base-2 logarithm that returns 0 for non-positive or non-finite input.

    >>> safe_log2([4.0, 0.0, -1.0])
    array([2., 0., 0.])
    """
    x = np.asarray(x, dtype=float)
    valid = np.isfinite(x) & (x > 0)
    out = np.zeros_like(x)
    np.log2(x, out=out, where=valid)
    return float(out) if out.ndim == 0 else out


def entropy(p: ArrayLike) -> float:
    """Shannon entropy ``H(p) = -sum p_i log2 p_i`` in bits.

    The input is flattened and is not renormalised. Zero, negative and
    non-finite entries contribute nothing.

    Parameters
    ----------
    p : array-like
        Probability vector (or array of any shape).

    Returns
    -------
    float
        Entropy in bits.

    Examples
    --------
    >>> entropy([0.25, 0.25, 0.25, 0.25])
    2.0
    """
    p = np.asarray(p, dtype=float).ravel()
    terms = np.where(np.isfinite(p) & (p > 0), p, 0.0)
    return float(np.sum(entr(terms)) / _LN2)


def as_joint(data: JointLike, shape: Optional[Sequence[int]] = None) -> np.ndarray:
    """Return `data` as an N-dimensional float array.

    Parameters
    ----------
    data : array-like or Histogram
        Joint probabilities, either already shaped or flattened.
    shape : sequence of int, optional
        Shape to apply to flattened data.

    Returns
    -------
    ndarray
        Joint distribution with one axis per variable.
    """
    if isinstance(data, Histogram):
        arr = data.to_array()
    else:
        arr = np.asarray(data, dtype=float)
    if shape is not None:
        arr = arr.reshape(tuple(shape))
    return arr


def _check_axes(axes: Iterable[int], ndim: int) -> List[int]:
    axes = [int(ax) for ax in axes]
    for ax in axes:
        if not 0 <= ax < ndim:
            raise ValueError(f"axis {ax} out of range for {ndim}-dimensional array")
    if len(set(axes)) != len(axes):
        raise ValueError(f"duplicate axes in {axes}")
    return axes


def marginalize(array: JointLike, keep_axes: Iterable[int]) -> np.ndarray:
    """Sum out every axis not in `keep_axes`.

    Parameters
    ----------
    array : array-like or Histogram
        N-dimensional joint distribution.
    keep_axes : iterable of int
        Axes to keep. The result's axes follow this order.

    Returns
    -------
    ndarray
        Marginal distribution, a new array. Keeping every axis returns a
        copy of the input (permuted if `keep_axes` is not in order).

    Examples
    --------
    >>> p = np.array([[0.1, 0.2], [0.3, 0.4]])
    >>> marginalize(p, [1])
    array([0.4, 0.6])
    """
    p = as_joint(array)
    keep = _check_axes(keep_axes, p.ndim)

    drop = tuple(ax for ax in range(p.ndim) if ax not in keep)
    summed = p.sum(axis=drop) if drop else p.copy()

    remaining = sorted(keep)
    order = [remaining.index(ax) for ax in keep]
    return np.ascontiguousarray(np.transpose(summed, order))


def joint_entropy(array: JointLike, axes: Iterable[int]) -> float:
    """Joint entropy ``H(X_axes)`` of the variables on `axes`.

    Returns 0 when `axes` is empty.
    """
    axes = list(axes)
    if not axes:
        return 0.0
    return entropy(marginalize(array, axes))


def conditional_entropy(
    array: JointLike,
    target: Iterable[int],
    conditioning: Iterable[int],
) -> float:
    """Conditional entropy ``H(X | Y)`` via the chain rule.

    ``H(X | Y) = H(X, Y) - H(Y)``, which reduces to ``H(X)`` when
    `conditioning` is empty.

    Parameters
    ----------
    array : array-like or Histogram
        N-dimensional joint distribution.
    target : iterable of int
        Axes of X.
    conditioning : iterable of int
        Axes of Y.

    Returns
    -------
    float
        Conditional entropy in bits.
    """
    target = list(target)
    conditioning = list(conditioning)
    if not conditioning:
        return joint_entropy(array, target)

    joint = joint_entropy(array, union_indices(target, conditioning))
    return joint - joint_entropy(array, conditioning)


def mutual_information(
    array: JointLike,
    set_a: Iterable[int],
    set_b: Iterable[int],
) -> float:
    """Mutual information ``I(A; B) = H(A) - H(A | B)``.

    Returns 0 if either set is empty.

    Examples
    --------
    >>> p = np.array([[0.5, 0.0], [0.0, 0.5]])
    >>> mutual_information(p, [0], [1])
    1.0
    """
    set_a = list(set_a)
    set_b = list(set_b)
    if not set_a or not set_b:
        return 0.0
    p = as_joint(array)
    return joint_entropy(p, set_a) - conditional_entropy(p, set_a, set_b)


def conditional_mutual_information(
    array: JointLike,
    set_a: Iterable[int],
    set_b: Iterable[int],
    conditioning: Iterable[int],
) -> float:
    """Conditional mutual information ``I(A; B | Z) = H(A | Z) - H(A | B, Z)``.

    Returns 0 if `set_a` or `set_b` is empty and reduces to
    :func:`mutual_information` when `conditioning` is empty.
    """
    set_a = list(set_a)
    set_b = list(set_b)
    conditioning = list(conditioning)
    if not set_a or not set_b:
        return 0.0
    if not conditioning:
        return mutual_information(array, set_a, set_b)

    p = as_joint(array)
    h_a_given_z = conditional_entropy(p, set_a, conditioning)
    h_a_given_bz = conditional_entropy(p, set_a, union_indices(set_b, conditioning))
    return h_a_given_z - h_a_given_bz
