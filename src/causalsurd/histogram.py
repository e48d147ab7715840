"""
N-dimensional histograms for discrete probability estimation.

A :class:`Histogram` discretises a sample matrix (rows are samples, columns
are variables) into a joint probability distribution over equal-width bins.
Column 0 is conventionally the target and the remaining columns the agents.

Every bin receives an additive smoothing mass of ``SMOOTHING`` before
normalisation, so no probability is exactly zero and logarithms taken
downstream stay finite.
"""

import logging
from typing import Sequence, Tuple
import numpy as np
from numpy.typing import ArrayLike

from causalsurd.utils import row_major_strides

__all__ = [
    "Histogram",
    "HistogramError",
    "build_histogram",
    "SMOOTHING",
    "MIN_BINS",
    "MAX_BINS",
]

logger = logging.getLogger(__name__)

SMOOTHING = 1e-14
MIN_BINS = 1
MAX_BINS = 10000
RANGE_EPSILON = 1e-10


class HistogramError(ValueError):
    """Raised when a histogram cannot be built from the given samples."""


class Histogram:
    """Immutable N-dimensional joint probability histogram.

    Probabilities are stored flattened in row-major order. The buffer is
    read-only and every accessor hands out an independent copy, so callers
    can modify what they receive without affecting the histogram.

    Parameters
    ----------
    probabilities : array-like
        Flattened probabilities, ``prod(shape)`` entries.
    shape : sequence of int
        Number of bins along each variable axis.

    Use :func:`build_histogram` to construct one from samples.
    """

    __slots__ = ("_probs", "_shape")

    def __init__(self, probabilities: ArrayLike, shape: Sequence[int]):
        probs = np.array(probabilities, dtype=float).ravel()
        shape = tuple(int(s) for s in shape)
        if probs.size != int(np.prod(shape, dtype=np.int64)):
            raise HistogramError(
                f"probabilities have {probs.size} entries, shape {list(shape)} "
                f"requires {int(np.prod(shape, dtype=np.int64))}"
            )
        probs.flags.writeable = False
        self._probs = probs
        self._shape = shape

    @property
    def probabilities(self) -> np.ndarray:
        """Copy of the flattened probability vector."""
        return self._probs.copy()

    @property
    def shape(self) -> Tuple[int, ...]:
        """Number of bins per variable."""
        return self._shape

    @property
    def size(self) -> int:
        """Total number of bins."""
        return self._probs.size

    @property
    def ndim(self) -> int:
        """Number of variables (axes)."""
        return len(self._shape)

    def to_array(self) -> np.ndarray:
        """Copy of the probabilities reshaped to ``shape``."""
        return self._probs.reshape(self._shape).copy()

    def __repr__(self) -> str:
        return f"Histogram(shape={list(self._shape)}, size={self.size})"


def _as_sample_matrix(samples: ArrayLike, n_vars: int) -> np.ndarray:
    """Convert samples to a float matrix, checking every row length."""
    if isinstance(samples, np.ndarray):
        if samples.ndim != 2:
            raise HistogramError(
                f"samples must be a 2-D matrix, got {samples.ndim} dimensions"
            )
        if samples.shape[0] == 0:
            raise HistogramError("samples cannot be empty")
        if samples.shape[1] != n_vars:
            raise HistogramError(
                f"bins length ({n_vars}) must match number of variables ({samples.shape[1]})"
            )
        return samples.astype(float)

    rows = list(samples)
    if not rows:
        raise HistogramError("samples cannot be empty")
    if len(rows[0]) != n_vars:
        raise HistogramError(
            f"bins length ({n_vars}) must match number of variables ({len(rows[0])})"
        )
    for i, row in enumerate(rows):
        if len(row) != n_vars:
            raise HistogramError(f"sample {i} has length {len(row)}, expected {n_vars}")
    return np.array(rows, dtype=float)


def _validate_bins(bins: Sequence[int]) -> Tuple[int, ...]:
    bins = tuple(bins)
    if not bins:
        raise HistogramError("samples must have at least one variable")
    for i, b in enumerate(bins):
        if int(b) != b:
            raise HistogramError(f"bins[{i}] = {b} is not an integer")
        if b < MIN_BINS:
            raise HistogramError(f"bins[{i}] = {b} is less than minimum {MIN_BINS}")
        if b > MAX_BINS:
            raise HistogramError(f"bins[{i}] = {b} exceeds maximum {MAX_BINS}")
    return tuple(int(b) for b in bins)


def build_histogram(samples: ArrayLike, bins: Sequence[int]) -> Histogram:
    """Build a smoothed, normalised N-dimensional histogram from samples.

    Parameters
    ----------
    samples : array-like of shape (n_samples, n_variables)
        Sample matrix. ``samples[i][j]`` is variable ``j`` in sample ``i``.
    bins : sequence of int
        Number of equal-width bins per variable, each in
        ``[MIN_BINS, MAX_BINS]``.

    Returns
    -------
    Histogram
        Joint probability distribution of shape ``tuple(bins)``.

    Raises
    ------
    HistogramError
        If the samples are empty, row lengths disagree with `bins`, a bin
        count is out of range, a variable has no finite value, or no sample
        is entirely finite.

    Notes
    -----
    Variable ranges are taken over all finite values. Samples holding any
    NaN or Inf are then dropped as a whole. A constant variable has its
    range widened by ``RANGE_EPSILON`` so its single value lands in bin 0.
    Values equal to the maximum are placed in the last bin.

    Examples
    --------
    >>> hist = build_histogram([[0.0, 1.0], [1.0, 0.0]], [2, 2])
    >>> hist.shape
    (2, 2)
    """
    bins = _validate_bins(bins)
    data = _as_sample_matrix(samples, len(bins))
    n_vars = len(bins)

    finite = np.isfinite(data)
    has_values = finite.any(axis=0)
    if not has_values.all():
        j = int(np.flatnonzero(~has_values)[0])
        raise HistogramError(f"variable {j} has no valid (non-NaN, non-Inf) values")

    valid = finite.all(axis=1)
    n_valid = int(valid.sum())
    if n_valid == 0:
        raise HistogramError("all samples were invalid (NaN or Inf)")
    if n_valid < len(data):
        logger.warning(
            "Dropped %d of %d samples containing NaN or Inf values",
            len(data) - n_valid, len(data),
        )

    masked = np.where(finite, data, np.nan)
    mins = np.nanmin(masked, axis=0)
    maxs = np.nanmax(masked, axis=0)
    span = maxs - mins
    constant = span == 0
    if constant.any():
        logger.debug("Widening constant variables %s", np.flatnonzero(constant).tolist())
        span[constant] = RANGE_EPSILON

    dims = np.asarray(bins, dtype=np.intp)
    normalized = (data[valid] - mins) / span
    bin_idx = np.floor(normalized * dims).astype(np.intp)
    bin_idx = np.clip(bin_idx, 0, dims - 1)

    flat_idx = bin_idx @ row_major_strides(bins)
    total_bins = int(np.prod(dims, dtype=np.int64))
    counts = np.bincount(flat_idx, minlength=total_bins).astype(float)

    counts += SMOOTHING
    probs = counts / counts.sum()

    logger.debug(
        "Built histogram of shape %s from %d samples over %d variables",
        list(bins), n_valid, n_vars,
    )
    return Histogram(probs, bins)
