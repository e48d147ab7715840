"""
Synergistic-Unique-Redundant Decomposition (SURD) of causality.

SURD splits the information a future target state receives from a set of
agent variables into redundant, unique and synergistic increments, plus a
leak term for the influence of unobserved variables:

    H(T) = sum ΔI^R + sum ΔI^U + sum ΔI^S + ΔI_leak

The decomposition works per target state ``t``. For every agent combination
``c`` it computes the specific mutual information

    I_s(t; c) = sum_c p(c | t) [log2 p(t | c) - log2 p(t)]

sorts these values, discards higher-order combinations that do not exceed
what their lower-order counterparts already explain, and attributes the
successive increments either to the redundancy of the agents not yet
revealed (singletons) or to the synergy of a joint combination.

Reference
---------
Martínez-Sánchez, Arranz & Lozano-Durán (2024). "Decomposing causality into
its synergistic, unique, and redundant components". Nature Communications.
https://doi.org/10.1038/s41467-024-53373-4
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from types import MappingProxyType
import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple
import numpy as np
from numpy.typing import ArrayLike

from causalsurd.entropy import (
    as_joint,
    conditional_entropy,
    joint_entropy,
    marginalize,
    mutual_information,
    safe_log2,
)
from causalsurd.histogram import Histogram, HistogramError, build_histogram
from causalsurd.utils import Combination, generate_combinations

__all__ = [
    "SURDResult",
    "DecompositionError",
    "decompose",
    "decompose_from_data",
]

logger = logging.getLogger(__name__)


class DecompositionError(ValueError):
    """Raised when a decomposition cannot be performed."""


def _format_key(comb: Combination) -> str:
    return ",".join(str(c) for c in comb)


@dataclass(frozen=True)
class SURDResult:
    """Result of a SURD decomposition.

    Combination keys are sorted tuples of agent axes, so ``(1,)`` is the
    first agent and ``(1, 2)`` the pair of the first two agents. All values
    are in bits.

    Attributes
    ----------
    redundant : mapping
        Redundant causality per combination of two or more agents.
    unique : mapping
        Unique causality per single agent.
    synergistic : mapping
        Synergistic causality per combination of two or more agents.
    mutual_info : mapping
        Mutual information ``I(target; c)`` for every combination.
    info_leak : float
        ``H(target | agents) / H(target)``, the share of target entropy not
        explained by the observed agents. Not clamped to ``[0, 1]``.
    """
    redundant: Mapping[Combination, float]
    unique: Mapping[Combination, float]
    synergistic: Mapping[Combination, float]
    mutual_info: Mapping[Combination, float]
    info_leak: float

    def __post_init__(self):
        for name in ("redundant", "unique", "synergistic", "mutual_info"):
            object.__setattr__(
                self, name, MappingProxyType(dict(getattr(self, name)))
            )

    @property
    def n_agents(self) -> int:
        """Number of agent variables in the decomposition."""
        return max((max(k) for k in self.mutual_info), default=0)

    @property
    def total_redundant(self) -> float:
        """Sum of all redundant increments."""
        return float(sum(self.redundant.values()))

    @property
    def total_unique(self) -> float:
        """Sum of all unique increments."""
        return float(sum(self.unique.values()))

    @property
    def total_synergistic(self) -> float:
        """Sum of all synergistic increments."""
        return float(sum(self.synergistic.values()))

    @property
    def total_causality(self) -> float:
        """Redundant + unique + synergistic causality."""
        return self.total_redundant + self.total_unique + self.total_synergistic

    def to_dict(self) -> Dict[str, object]:
        """Plain-dict export with string keys such as ``"1,2"``."""
        return {
            "redundant": {_format_key(k): v for k, v in self.redundant.items()},
            "unique": {_format_key(k): v for k, v in self.unique.items()},
            "synergistic": {_format_key(k): v for k, v in self.synergistic.items()},
            "mutual_info": {_format_key(k): v for k, v in self.mutual_info.items()},
            "info_leak": self.info_leak,
        }

    def __repr__(self) -> str:
        parts = ["SURDResult("]
        for label, mapping in (
            ("R", self.redundant),
            ("U", self.unique),
            ("S", self.synergistic),
        ):
            for key, value in mapping.items():
                parts.append(f"  {label}[{_format_key(key)}] = {value:.4f},")
        parts.extend([
            f"  info_leak = {self.info_leak:.4f}",
            ")",
        ])
        return "\n".join(parts)


def _specific_mutual_information(
    p: np.ndarray,
    comb: Combination,
    p_target: np.ndarray,
) -> np.ndarray:
    """Specific mutual information ``I_s(t; comb)`` for every target state.

    Cells where ``p(t)`` or ``p(comb)`` is not positive contribute nothing.
    """
    p_as = marginalize(p, (0,) + comb)
    p_a = p_as.sum(axis=0, keepdims=True)
    p_s = p_target.reshape((-1,) + (1,) * len(comb))

    valid = (p_s > 0) & (p_a > 0)
    with np.errstate(divide="ignore", invalid="ignore"):
        p_a_given_s = np.where(valid, p_as / p_s, 0.0)
        p_s_given_a = np.where(valid, p_as / p_a, 0.0)

    terms = p_a_given_s * (safe_log2(p_s_given_a) - safe_log2(p_s))
    terms = np.where(valid, terms, 0.0)
    return terms.reshape(len(p_target), -1).sum(axis=1)


def _apply_monotonic_floor(
    combs: Sequence[Combination],
    values: np.ndarray,
) -> np.ndarray:
    """Zero higher-order values that fall below their lower-order floor.

    For each length ``l`` the floor is the largest already-filtered value
    among length-``l`` combinations (never below 0). Any length-``l+1``
    combination strictly under that floor is set to 0.
    """
    filtered = np.array(values, dtype=float)
    lengths = np.array([len(c) for c in combs])
    max_len = int(lengths.max()) if len(lengths) else 0

    for length in range(1, max_len):
        floor = float(filtered[lengths == length].max(initial=0.0))
        higher = (lengths == length + 1) & (filtered < floor)
        filtered[higher] = 0.0
    return filtered


def _per_combination_terms(
    p: np.ndarray,
    combs: List[Combination],
    p_target: np.ndarray,
    max_workers: Optional[int],
) -> Tuple[Dict[Combination, np.ndarray], Dict[Combination, float]]:
    def compute(comb):
        return (
            _specific_mutual_information(p, comb, p_target),
            mutual_information(p, [0], list(comb)),
        )

    if max_workers is not None and max_workers > 1:
        logger.debug("Computing %d combinations on %d workers", len(combs), max_workers)
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outputs = list(pool.map(compute, combs))
    else:
        outputs = [compute(comb) for comb in combs]

    specific = {comb: out[0] for comb, out in zip(combs, outputs)}
    mutual_info = {comb: float(out[1]) for comb, out in zip(combs, outputs)}
    return specific, mutual_info


def decompose(
    histogram: Optional[Histogram],
    max_workers: Optional[int] = None,
) -> SURDResult:
    """Decompose target causality into redundant, unique and synergistic parts.

    Parameters
    ----------
    histogram : Histogram or array-like
        Joint distribution ``p(target, agent_1, ..., agent_k)``. Axis 0 is
        the target (future state), axes 1..k are the agents.
    max_workers : int, optional
        Threads used for the per-combination information terms. ``None``
        or 1 runs sequentially. Results do not depend on this value.

    Returns
    -------
    SURDResult
        Redundant, unique, synergistic and mutual-information maps plus the
        information leak.

    Raises
    ------
    DecompositionError
        If `histogram` is None or has fewer than 2 axes.

    Examples
    --------
    >>> from causalsurd import build_histogram, decompose
    >>> from causalsurd.simulation import generate_xor_system
    >>> hist = build_histogram(generate_xor_system(10000, seed=0), [2, 2, 2])
    >>> result = decompose(hist)
    >>> round(result.synergistic[(1, 2)], 2)
    1.0
    """
    if histogram is None:
        raise DecompositionError("histogram is None")

    p = as_joint(histogram)
    if p.ndim < 2:
        raise DecompositionError(
            f"histogram must have at least 2 dimensions (target + agents), got {p.ndim}"
        )

    n_agents = p.ndim - 1
    n_target = p.shape[0]
    agents = list(range(1, n_agents + 1))

    h_target = joint_entropy(p, [0])
    h_target_given_agents = conditional_entropy(p, [0], agents)
    # A single-bin target carries no entropy and therefore nothing to leak.
    info_leak = h_target_given_agents / h_target if h_target > 0 else 0.0

    combs = generate_combinations(n_agents)
    logger.debug(
        "Decomposing %d target states over %d agents (%d combinations), leak=%.4f",
        n_target, n_agents, len(combs), info_leak,
    )

    p_target = marginalize(p, [0])
    specific, mutual_info = _per_combination_terms(p, combs, p_target, max_workers)

    redundant = {comb: 0.0 for comb in combs}
    synergistic = {comb: 0.0 for comb in combs if len(comb) >= 2}

    for t in range(n_target):
        values = np.array([specific[comb][t] for comb in combs])

        order = np.argsort(values, kind="stable")
        sorted_combs = [combs[i] for i in order]
        filtered = _apply_monotonic_floor(sorted_combs, values[order])

        order = np.argsort(filtered, kind="stable")
        final_combs = [sorted_combs[i] for i in order]
        increments = np.diff(filtered[order], prepend=0.0)

        remaining = list(agents)
        for comb, increment in zip(final_combs, increments):
            info = float(increment * p_target[t])
            if len(comb) == 1:
                redundant[tuple(remaining)] += info
                remaining.remove(comb[0])
            else:
                synergistic[comb] += info

    unique = {key: redundant.pop(key) for key in list(redundant) if len(key) == 1}

    return SURDResult(
        redundant=redundant,
        unique=unique,
        synergistic=synergistic,
        mutual_info=mutual_info,
        info_leak=float(info_leak),
    )


def decompose_from_data(
    samples: ArrayLike,
    bins: Sequence[int],
    max_workers: Optional[int] = None,
) -> SURDResult:
    """Build a histogram from samples and decompose it.

    Parameters
    ----------
    samples : array-like of shape (n_samples, n_variables)
        Sample matrix; column 0 is the target, columns 1..k the agents.
        See :func:`causalsurd.utils.create_lagged_samples` for building one
        from time series.
    bins : sequence of int
        Number of bins per variable.
    max_workers : int, optional
        Passed to :func:`decompose`.

    Returns
    -------
    SURDResult

    Raises
    ------
    DecompositionError
        If the histogram cannot be built (the cause is chained) or the data
        has fewer than 2 variables.

    Examples
    --------
    >>> import numpy as np
    >>> np.random.seed(0)
    >>> x = np.random.rand(5000).round()
    >>> data = np.column_stack([x, x, np.random.rand(5000).round()])
    >>> result = decompose_from_data(data, [2, 2, 2])
    >>> round(result.unique[(1,)], 2)
    1.0
    """
    try:
        hist = build_histogram(samples, bins)
    except HistogramError as exc:
        raise DecompositionError(f"failed to create histogram: {exc}") from exc

    return decompose(hist, max_workers=max_workers)
