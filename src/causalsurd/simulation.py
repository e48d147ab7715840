"""
Synthetic systems with known causal structure.

The binary systems are the canonical SURD validation cases: a target that
copies one of two identical agents (pure redundancy), copies one of two
independent agents (pure unique causality), or is their XOR (pure synergy).
Each returns a lagged sample matrix ``[target(t + lag), agent_1(t), ...]``
ready for :func:`causalsurd.decompose_from_data`.
"""

from typing import Callable, Dict, Optional
import numpy as np

from causalsurd.utils import create_lagged_samples

__all__ = [
    "generate_duplicated_input",
    "generate_independent_inputs",
    "generate_xor_system",
    "generate_redundant_sources",
    "generate_mediator_chain",
    "generate_benchmark_system",
    "BENCHMARK_SYSTEMS",
]


def _binary_series(n: int) -> np.ndarray:
    return np.random.rand(n).round()


def _roll_and_lag(source: np.ndarray, agents, lag: int) -> np.ndarray:
    # target(t) = source(t - lag), paired with agents(t - lag)
    target = np.roll(source, lag)
    return create_lagged_samples(target, agents, lag=lag)


def _check_sizes(n: int, lag: int) -> None:
    if n < 1:
        raise ValueError(f"n must be positive, got {n}")
    if lag < 1:
        raise ValueError(f"lag must be at least 1, got {lag}")


def generate_duplicated_input(
    n: int,
    lag: int = 1,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Target driven by two identical agents.

    Both agents carry the same bit, so all causality should be redundant:
    ``R[(1, 2)] ≈ 1`` bit, unique and synergistic ≈ 0, leak ≈ 0.

    Parameters
    ----------
    n : int
        Number of samples returned.
    lag : int, default=1
        Delay between agents and target.
    seed : int, optional
        Random seed for reproducibility.

    Returns
    -------
    ndarray of shape (n, 3)
        Columns ``[target, agent_1, agent_2]``.
    """
    _check_sizes(n, lag)
    if seed is not None:
        np.random.seed(seed)

    q1 = _binary_series(n + lag)
    return _roll_and_lag(q1, [q1, q1], lag)


def generate_independent_inputs(
    n: int,
    lag: int = 1,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Target that copies agent 1 while agent 2 is independent noise.

    Expected: ``U[(1,)] ≈ 1`` bit, ``U[(2,)] ≈ 0``, no redundancy or
    synergy, leak ≈ 0.

    Returns
    -------
    ndarray of shape (n, 3)
        Columns ``[target, agent_1, agent_2]``.
    """
    _check_sizes(n, lag)
    if seed is not None:
        np.random.seed(seed)

    q1 = _binary_series(n + lag)
    q2 = _binary_series(n + lag)
    return _roll_and_lag(q1, [q1, q2], lag)


def generate_xor_system(
    n: int,
    lag: int = 1,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Target equal to the XOR of two independent binary agents.

    Neither agent alone says anything about the target, so all causality
    should be synergistic: ``S[(1, 2)] ≈ 1`` bit.

    Returns
    -------
    ndarray of shape (n, 3)
        Columns ``[target, agent_1, agent_2]``.
    """
    _check_sizes(n, lag)
    if seed is not None:
        np.random.seed(seed)

    q1 = _binary_series(n + lag)
    q2 = _binary_series(n + lag)
    xor = np.logical_xor(q1, q2).astype(float)
    return _roll_and_lag(xor, [q1, q2], lag)


def generate_redundant_sources(
    n: int,
    noise_sd: float = 0.05,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Continuous target driven by two nearly identical sources.

    ``x1 ~ N(0, 1)``, ``x2 = x1 + ε``, ``y = x1 + x2 + ε``.

    Returns
    -------
    ndarray of shape (n, 3)
        Columns ``[y, x1, x2]``.
    """
    _check_sizes(n, 1)
    if seed is not None:
        np.random.seed(seed)

    x1 = np.random.randn(n)
    x2 = x1 + np.random.normal(0, noise_sd, n)
    y = x1 + x2 + np.random.normal(0, noise_sd, n)
    return np.column_stack([y, x1, x2])


def generate_mediator_chain(
    n: int,
    noise_sd: float = 0.3,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Continuous causal chain ``x1 → x2 → y``.

    ``x1`` only reaches ``y`` through the mediator ``x2``.

    Returns
    -------
    ndarray of shape (n, 3)
        Columns ``[y, x1, x2]``.
    """
    _check_sizes(n, 1)
    if seed is not None:
        np.random.seed(seed)

    x1 = np.random.randn(n)
    x2 = 0.8 * x1 + np.random.normal(0, noise_sd, n)
    y = 0.8 * x2 + np.random.normal(0, noise_sd, n)
    return np.column_stack([y, x1, x2])


BENCHMARK_SYSTEMS: Dict[str, Callable[..., np.ndarray]] = {
    "duplicated": generate_duplicated_input,
    "independent": generate_independent_inputs,
    "xor": generate_xor_system,
    "redundant_sources": generate_redundant_sources,
    "mediator_chain": generate_mediator_chain,
}


def generate_benchmark_system(
    name: str,
    n: int = 10000,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Generate a registered benchmark system by name.

    Parameters
    ----------
    name : str
        One of ``BENCHMARK_SYSTEMS``: 'duplicated', 'independent', 'xor',
        'redundant_sources', 'mediator_chain'.
    n : int, default=10000
        Number of samples.
    seed : int, optional
        Random seed.

    Returns
    -------
    ndarray of shape (n, 3)
        Sample matrix with the target in column 0.
    """
    if name not in BENCHMARK_SYSTEMS:
        raise ValueError(f"Unknown system: {name}. Available: {list(BENCHMARK_SYSTEMS.keys())}")
    return BENCHMARK_SYSTEMS[name](n, seed=seed)
