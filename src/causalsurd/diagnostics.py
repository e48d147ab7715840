"""
Sanity checks for SURD decompositions.

Two properties are worth verifying before interpreting a decomposition:

1. **Additivity**: the redundant, unique and synergistic increments should
   add up to the mutual information between the target and the full set of
   agents. Large gaps mean the monotonic filtering discarded a sizeable
   amount of specific information, which typically signals too few samples
   per bin.
2. **Leak range**: the information leak is a ratio of entropies and is
   expected in ``[0, 1]``. It is reported as computed and never clamped, so
   values slightly outside the range point to smoothing or round-off.
"""

from dataclasses import dataclass
import numpy as np

from causalsurd.decomposition import SURDResult

__all__ = [
    "AdditivityResult",
    "LeakResult",
    "DiagnosticSummary",
    "check_additivity",
    "check_info_leak",
    "run_diagnostics",
]


@dataclass
class AdditivityResult:
    """Comparison of R + U + S against the full mutual information.

    Attributes
    ----------
    total_causality : float
        Sum of redundant, unique and synergistic increments.
    full_mutual_info : float
        ``I(target; agent_1, ..., agent_k)``.
    gap : float
        ``total_causality - full_mutual_info``.
    tolerance : float
        Largest absolute gap accepted.
    """
    total_causality: float
    full_mutual_info: float
    gap: float
    tolerance: float

    @property
    def is_additive(self) -> bool:
        """Whether the absolute gap is within tolerance."""
        return abs(self.gap) <= self.tolerance

    def __repr__(self) -> str:
        status = "✓ additive" if self.is_additive else "✗ not additive"
        return (
            f"AdditivityResult(\n"
            f"  R+U+S = {self.total_causality:.4f}, I_full = {self.full_mutual_info:.4f},\n"
            f"  gap = {self.gap:.4f} ({status})\n"
            f")"
        )


@dataclass
class LeakResult:
    """Range check for the information leak."""
    info_leak: float
    tolerance: float

    @property
    def in_range(self) -> bool:
        """Whether the leak lies in ``[-tolerance, 1 + tolerance]``."""
        return -self.tolerance <= self.info_leak <= 1 + self.tolerance

    def __repr__(self) -> str:
        status = "✓ in range" if self.in_range else "✗ out of range"
        return f"LeakResult(info_leak = {self.info_leak:.4f}, {status})"


@dataclass
class DiagnosticSummary:
    """Combined results of all decomposition checks."""
    additivity: AdditivityResult
    leak: LeakResult

    @property
    def all_passed(self) -> bool:
        return self.additivity.is_additive and self.leak.in_range

    def __repr__(self) -> str:
        return (
            f"DiagnosticSummary(\n"
            f"  additivity: {'✓' if self.additivity.is_additive else '✗'} "
            f"(gap = {self.additivity.gap:.4f}),\n"
            f"  leak: {'✓' if self.leak.in_range else '✗'} "
            f"(info_leak = {self.leak.info_leak:.4f}),\n"
            f"  all_passed: {self.all_passed}\n"
            f")"
        )


def check_additivity(result: SURDResult, tolerance: float = 0.05) -> AdditivityResult:
    """Check that R + U + S recovers the full mutual information.

    Parameters
    ----------
    result : SURDResult
        Decomposition to check.
    tolerance : float, default=0.05
        Largest absolute gap, in bits, still considered additive.

    Returns
    -------
    AdditivityResult
        Check `.is_additive` for the verdict.

    Examples
    --------
    >>> from causalsurd import decompose_from_data
    >>> from causalsurd.simulation import generate_xor_system
    >>> result = decompose_from_data(generate_xor_system(5000, seed=1), [2, 2, 2])
    >>> check_additivity(result).is_additive
    True
    """
    full = tuple(range(1, result.n_agents + 1))
    full_mi = float(result.mutual_info.get(full, np.nan))
    total = result.total_causality
    return AdditivityResult(
        total_causality=total,
        full_mutual_info=full_mi,
        gap=total - full_mi,
        tolerance=tolerance,
    )


def check_info_leak(result: SURDResult, tolerance: float = 1e-9) -> LeakResult:
    """Check that the unclamped information leak lies in ``[0, 1]``."""
    return LeakResult(info_leak=result.info_leak, tolerance=tolerance)


def run_diagnostics(
    result: SURDResult,
    additivity_tolerance: float = 0.05,
    leak_tolerance: float = 1e-9,
) -> DiagnosticSummary:
    """Run all decomposition checks.

    Parameters
    ----------
    result : SURDResult
        Decomposition to check.
    additivity_tolerance : float, default=0.05
        Passed to :func:`check_additivity`.
    leak_tolerance : float, default=1e-9
        Passed to :func:`check_info_leak`.

    Returns
    -------
    DiagnosticSummary
        Check `.all_passed` for the overall verdict.
    """
    return DiagnosticSummary(
        additivity=check_additivity(result, tolerance=additivity_tolerance),
        leak=check_info_leak(result, tolerance=leak_tolerance),
    )
