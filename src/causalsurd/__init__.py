"""
causalSURD: Synergistic-Unique-Redundant Decomposition of causality.

This package decomposes the causal information a target variable receives
from a set of agent variables into redundant, unique and synergistic
components, plus an information leak attributed to unobserved variables.

The Decomposition
-----------------
For a future target state T⁺ and present agents Q₁, ..., Qₖ:

    H(T⁺) = Σ ΔI^R + Σ ΔI^U + Σ ΔI^S + ΔI_leak

- **Redundant** (R): causality shared by several agents
- **Unique** (U): causality available from one agent only
- **Synergistic** (S): causality that only appears when agents are observed
  jointly
- **Leak**: H(T⁺ | agents) / H(T⁺), the part no observed agent explains

Pipeline
--------
1. **Histogram**: samples are discretised into a smoothed joint probability
   array (`build_histogram`)
2. **Entropy primitives**: entropies and (conditional) mutual information
   over any subset of axes
3. **Decomposition**: specific mutual information per target state is
   sorted, filtered and attributed to R, U or S (`decompose`)

Quick Start
-----------
>>> from causalsurd import decompose_from_data
>>> from causalsurd.simulation import generate_xor_system
>>>
>>> # Target is the XOR of two binary agents: purely synergistic
>>> data = generate_xor_system(10000, seed=42)
>>> result = decompose_from_data(data, bins=[2, 2, 2])
>>> print(result)
>>> print(f"Synergy: {result.synergistic[(1, 2)]:.3f} bits")

Time series are turned into a sample matrix with `create_lagged_samples`,
which pairs the target at ``t + lag`` with the agents at ``t``.

Main Functions
--------------
- `decompose`: SURD on a prepared histogram
- `decompose_from_data`: build the histogram and decompose in one step
- `build_histogram`: N-dimensional smoothed histogram
- `mutual_information`, `conditional_entropy`, ...: entropy primitives
- `run_diagnostics`: additivity and leak checks on a result

Reference
---------
Martínez-Sánchez, Á., Arranz, G. & Lozano-Durán, A. Decomposing causality
into its synergistic, unique, and redundant components. Nat. Commun. 15,
9296 (2024).
"""

__version__ = "0.1.0"

# Histogram construction
from causalsurd.histogram import (
    Histogram,
    HistogramError,
    build_histogram,
)

# Entropy primitives
from causalsurd.entropy import (
    safe_log2,
    entropy,
    as_joint,
    marginalize,
    joint_entropy,
    conditional_entropy,
    mutual_information,
    conditional_mutual_information,
)

# Decomposition
from causalsurd.decomposition import (
    SURDResult,
    DecompositionError,
    decompose,
    decompose_from_data,
)

# Diagnostic tools
from causalsurd.diagnostics import (
    AdditivityResult,
    LeakResult,
    DiagnosticSummary,
    check_additivity,
    check_info_leak,
    run_diagnostics,
)

# Utility functions
from causalsurd.utils import (
    Combination,
    combination_key,
    create_lagged_samples,
    generate_combinations,
    ravel_multi_index,
    row_major_strides,
    union_indices,
    unravel_index,
)

__all__ = [
    # Version info
    "__version__",
    # Histogram
    "Histogram",
    "HistogramError",
    "build_histogram",
    # Entropy
    "safe_log2",
    "entropy",
    "as_joint",
    "marginalize",
    "joint_entropy",
    "conditional_entropy",
    "mutual_information",
    "conditional_mutual_information",
    # Decomposition
    "SURDResult",
    "DecompositionError",
    "decompose",
    "decompose_from_data",
    # Diagnostics
    "AdditivityResult",
    "LeakResult",
    "DiagnosticSummary",
    "check_additivity",
    "check_info_leak",
    "run_diagnostics",
    # Utils
    "Combination",
    "combination_key",
    "create_lagged_samples",
    "generate_combinations",
    "ravel_multi_index",
    "row_major_strides",
    "union_indices",
    "unravel_index",
]
