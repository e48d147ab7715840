"""
Unit tests for the entropy primitives.
"""

import numpy as np
import pytest
from causalsurd import (
    build_histogram,
    conditional_entropy,
    conditional_mutual_information,
    entropy,
    joint_entropy,
    marginalize,
    mutual_information,
    safe_log2,
)
from causalsurd.entropy import as_joint


@pytest.fixture
def random_joint():
    """Random strictly positive 3-D joint distribution."""
    rng = np.random.RandomState(7)
    p = rng.rand(3, 4, 2) + 0.01
    return p / p.sum()


@pytest.fixture
def xor_joint():
    """p(z, x, y) with z = x XOR y and x, y uniform bits."""
    p = np.zeros((2, 2, 2))
    for x in range(2):
        for y in range(2):
            p[x ^ y, x, y] = 0.25
    return p


class TestSafeLog2:
    """Tests for the safe logarithm."""

    def test_positive_values(self):
        """Test ordinary logarithms."""
        np.testing.assert_allclose(safe_log2([1.0, 2.0, 0.5]), [0.0, 1.0, -1.0])

    def test_degenerate_values_map_to_zero(self):
        """Test that zero, negative and non-finite inputs give zero."""
        result = safe_log2([0.0, -1.0, np.nan, np.inf])
        np.testing.assert_array_equal(result, [0.0, 0.0, 0.0, 0.0])

    def test_scalar(self):
        """Test that a scalar input gives a float."""
        assert safe_log2(8.0) == 3.0
        assert safe_log2(0.0) == 0.0


class TestEntropy:
    """Tests for Shannon entropy."""

    def test_uniform(self):
        """Test entropy of uniform distributions."""
        assert entropy([0.25] * 4) == pytest.approx(2.0)
        assert entropy(np.full(8, 1 / 8)) == pytest.approx(3.0)

    def test_deterministic(self):
        """Test that a point mass has zero entropy."""
        assert entropy([1.0, 0.0, 0.0]) == 0.0

    def test_zero_entries_ignored(self):
        """Test that zeros contribute nothing."""
        assert entropy([0.5, 0.0, 0.5]) == pytest.approx(1.0)

    def test_multidimensional_input_flattened(self):
        """Test that N-d input is treated as one distribution."""
        assert entropy(np.full((2, 2), 0.25)) == pytest.approx(2.0)


class TestMarginalize:
    """Tests for axis marginalisation."""

    def test_sums_out_other_axes(self, random_joint):
        """Test marginal against a direct numpy sum."""
        np.testing.assert_allclose(
            marginalize(random_joint, [1]), random_joint.sum(axis=(0, 2))
        )

    def test_keeps_requested_order(self, random_joint):
        """Test that kept axes follow the requested order."""
        marginal = marginalize(random_joint, [2, 0])

        assert marginal.shape == (2, 3)
        np.testing.assert_allclose(marginal, random_joint.sum(axis=1).T)

    def test_all_axes_returns_copy(self, random_joint):
        """Test that keeping every axis returns an independent copy."""
        marginal = marginalize(random_joint, [0, 1, 2])
        marginal[0, 0, 0] = 99.0

        assert random_joint[0, 0, 0] != 99.0

    def test_accepts_histogram(self):
        """Test marginalising a Histogram directly."""
        hist = build_histogram([[0.0, 0.0], [1.0, 1.0]], [2, 2])

        np.testing.assert_allclose(marginalize(hist, [0]), [0.5, 0.5])

    def test_flattened_input_via_as_joint(self, random_joint):
        """Test that flattened data plus shape is equivalent."""
        flat = random_joint.ravel()
        joint = as_joint(flat, random_joint.shape)

        np.testing.assert_allclose(marginalize(joint, [0]), random_joint.sum(axis=(1, 2)))

    def test_invalid_axis(self, random_joint):
        """Test error on an out-of-range axis."""
        with pytest.raises(ValueError, match="out of range"):
            marginalize(random_joint, [3])

    def test_duplicate_axis(self, random_joint):
        """Test error on repeated axes."""
        with pytest.raises(ValueError, match="duplicate"):
            marginalize(random_joint, [0, 0])


class TestJointAndConditionalEntropy:
    """Tests for joint and conditional entropy."""

    def test_empty_axes(self, random_joint):
        """Test that the trivial distribution has zero entropy."""
        assert joint_entropy(random_joint, []) == 0.0

    def test_joint_of_independent_variables(self):
        """Test additivity of entropy for independent variables."""
        p = np.outer([0.5, 0.5], [0.25, 0.75])

        expected = entropy([0.5, 0.5]) + entropy([0.25, 0.75])
        assert joint_entropy(p, [0, 1]) == pytest.approx(expected)

    def test_empty_conditioning(self, random_joint):
        """Test that H(X | ∅) = H(X)."""
        assert conditional_entropy(random_joint, [0], []) == pytest.approx(
            joint_entropy(random_joint, [0])
        )

    def test_chain_rule(self, random_joint):
        """Test H(X | Y) = H(X, Y) - H(Y)."""
        h = conditional_entropy(random_joint, [0], [1, 2])
        expected = joint_entropy(random_joint, [0, 1, 2]) - joint_entropy(random_joint, [1, 2])

        assert h == pytest.approx(expected)

    def test_overlapping_sets_not_double_counted(self, random_joint):
        """Test that shared axes between target and conditioning are merged."""
        h = conditional_entropy(random_joint, [0, 1], [1])
        expected = joint_entropy(random_joint, [0, 1]) - joint_entropy(random_joint, [1])

        assert h == pytest.approx(expected)

    def test_conditioning_reduces_entropy(self, random_joint):
        """Test H(X | Y) <= H(X)."""
        assert conditional_entropy(random_joint, [0], [1]) <= joint_entropy(random_joint, [0]) + 1e-12


class TestMutualInformation:
    """Tests for mutual and conditional mutual information."""

    def test_empty_sets(self, random_joint):
        """Test that MI with an empty set is zero."""
        assert mutual_information(random_joint, [], [1]) == 0.0
        assert mutual_information(random_joint, [0], []) == 0.0

    def test_identical_variables(self):
        """Test that I(X; X) = H(X) for a copied bit."""
        p = np.array([[0.5, 0.0], [0.0, 0.5]])

        assert mutual_information(p, [0], [1]) == pytest.approx(1.0)

    def test_independent_variables(self):
        """Test that independent variables share no information."""
        p = np.outer([0.3, 0.7], [0.6, 0.4])

        assert mutual_information(p, [0], [1]) == pytest.approx(0.0, abs=1e-12)

    def test_symmetry(self, random_joint):
        """Test I(A; B) = I(B; A)."""
        assert mutual_information(random_joint, [0], [1, 2]) == pytest.approx(
            mutual_information(random_joint, [1, 2], [0])
        )

    def test_bounds(self, random_joint):
        """Test 0 <= I(A; B) <= min(H(A), H(B))."""
        mi = mutual_information(random_joint, [0], [1])
        upper = min(joint_entropy(random_joint, [0]), joint_entropy(random_joint, [1]))

        assert -1e-12 <= mi <= upper + 1e-12

    def test_xor_pairwise_and_joint(self, xor_joint):
        """Test that XOR is invisible pairwise but fully visible jointly."""
        assert mutual_information(xor_joint, [0], [1]) == pytest.approx(0.0, abs=1e-12)
        assert mutual_information(xor_joint, [0], [2]) == pytest.approx(0.0, abs=1e-12)
        assert mutual_information(xor_joint, [0], [1, 2]) == pytest.approx(1.0)

    def test_cmi_empty_sets(self, random_joint):
        """Test that CMI with an empty set is zero."""
        assert conditional_mutual_information(random_joint, [], [1], [2]) == 0.0
        assert conditional_mutual_information(random_joint, [0], [], [2]) == 0.0

    def test_cmi_reduces_to_mi(self, random_joint):
        """Test I(A; B | ∅) = I(A; B)."""
        assert conditional_mutual_information(random_joint, [0], [1], []) == pytest.approx(
            mutual_information(random_joint, [0], [1])
        )

    def test_cmi_xor(self, xor_joint):
        """Test that conditioning on one XOR input reveals the other."""
        assert conditional_mutual_information(xor_joint, [0], [1], [2]) == pytest.approx(1.0)

    def test_cmi_chain_rule(self, random_joint):
        """Test I(A; B, C) = I(A; C) + I(A; B | C)."""
        total = mutual_information(random_joint, [0], [1, 2])
        parts = mutual_information(random_joint, [0], [2]) + conditional_mutual_information(
            random_joint, [0], [1], [2]
        )

        assert total == pytest.approx(parts)
