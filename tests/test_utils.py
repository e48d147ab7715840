"""
Unit tests for index arithmetic and combination helpers.
"""

import itertools

import numpy as np
import pytest
from scipy.special import comb
from causalsurd.utils import (
    combination_key,
    create_lagged_samples,
    generate_combinations,
    ravel_multi_index,
    row_major_strides,
    union_indices,
    unravel_index,
)


class TestIndexArithmetic:
    """Tests for flat and multi-dimensional index conversion."""

    def test_strides(self):
        """Test row-major strides from the rightmost axis inward."""
        np.testing.assert_array_equal(row_major_strides([2, 3, 4]), [12, 4, 1])
        np.testing.assert_array_equal(row_major_strides([5]), [1])

    @pytest.mark.parametrize("shape", [(1,), (4,), (2, 3), (3, 1, 2), (2, 2, 2, 2), (5, 4, 3)])
    def test_round_trip(self, shape):
        """Test that unravel(ravel(idx)) recovers every index."""
        for multi in itertools.product(*(range(s) for s in shape)):
            flat = ravel_multi_index(multi, shape)
            assert unravel_index(flat, shape) == multi

    @pytest.mark.parametrize("shape", [(2, 3), (3, 1, 2), (5, 4, 3)])
    def test_matches_numpy(self, shape):
        """Test agreement with numpy's C-order conversion."""
        size = int(np.prod(shape))
        for flat in range(size):
            assert unravel_index(flat, shape) == tuple(
                int(i) for i in np.unravel_index(flat, shape)
            )

    def test_vectorised_ravel(self):
        """Test ravelling several indices at once."""
        idx = np.array([[0, 0], [1, 2], [0, 1]])

        np.testing.assert_array_equal(ravel_multi_index(idx, (2, 3)), [0, 5, 1])

    def test_out_of_bounds(self):
        """Test errors for indices outside the shape."""
        with pytest.raises(ValueError, match="out of bounds"):
            ravel_multi_index((2, 0), (2, 3))
        with pytest.raises(ValueError, match="out of bounds"):
            unravel_index(6, (2, 3))

    def test_wrong_number_of_axes(self):
        """Test error when the index and shape disagree in length."""
        with pytest.raises(ValueError, match="axes"):
            ravel_multi_index((0, 0, 0), (2, 3))


class TestCombinations:
    """Tests for agent combination enumeration."""

    @pytest.mark.parametrize("k", [1, 2, 3, 4, 5])
    def test_count(self, k):
        """Test that 2^k - 1 unique combinations are produced."""
        combs = generate_combinations(k)

        assert len(combs) == 2 ** k - 1
        assert len(set(combs)) == len(combs)

    @pytest.mark.parametrize("k", [3, 4])
    def test_count_per_length(self, k):
        """Test the number of combinations of each length."""
        combs = generate_combinations(k)

        for length in range(1, k + 1):
            assert sum(len(c) == length for c in combs) == comb(k, length, exact=True)

    def test_order(self):
        """Test ordering by length then lexicographically."""
        assert generate_combinations(3) == [
            (1,), (2,), (3,), (1, 2), (1, 3), (2, 3), (1, 2, 3)
        ]

    def test_sorted_keys(self):
        """Test that every combination is canonically sorted."""
        for c in generate_combinations(4):
            assert c == tuple(sorted(c))

    def test_invalid_count(self):
        """Test error for zero agents."""
        with pytest.raises(ValueError, match="at least 1"):
            generate_combinations(0)

    def test_combination_key(self):
        """Test canonical keys are sorted and duplicate-free."""
        assert combination_key([3, 1, 2]) == (1, 2, 3)
        assert combination_key((2, 2, 1)) == (1, 2)
        assert combination_key([3, 1]) == combination_key([1, 3])

    def test_empty_combination_key(self):
        """Test error on an empty combination."""
        with pytest.raises(ValueError, match="at least one agent"):
            combination_key([])

    def test_union_indices(self):
        """Test first-seen ordered union."""
        assert union_indices([0, 2], [2, 1, 0]) == [0, 2, 1]
        assert union_indices([], [3, 3]) == [3]


class TestCreateLaggedSamples:
    """Tests for building sample matrices from time series."""

    def test_alignment(self):
        """Test that the target leads the agents by the lag."""
        target = np.arange(6, dtype=float)
        agent = np.arange(10, 16, dtype=float)

        samples = create_lagged_samples(target, [agent], lag=2)

        assert samples.shape == (4, 2)
        np.testing.assert_array_equal(samples[:, 0], [2, 3, 4, 5])
        np.testing.assert_array_equal(samples[:, 1], [10, 11, 12, 13])

    def test_target_as_own_agent(self):
        """Test the self-causality layout."""
        q = np.array([0.0, 1.0, 1.0, 0.0])

        samples = create_lagged_samples(q, [q], lag=1)

        np.testing.assert_array_equal(samples, [[1, 0], [1, 1], [0, 1]])

    def test_length_mismatch(self):
        """Test error on series of different lengths."""
        with pytest.raises(ValueError, match="same length"):
            create_lagged_samples(np.zeros(10), [np.zeros(9)])

    @pytest.mark.parametrize("lag", [0, 10])
    def test_invalid_lag(self, lag):
        """Test error on lags outside [1, n)."""
        with pytest.raises(ValueError, match="lag"):
            create_lagged_samples(np.zeros(10), [np.zeros(10)], lag=lag)

    def test_no_agents(self):
        """Test error when no agent series is given."""
        with pytest.raises(ValueError, match="at least one agent"):
            create_lagged_samples(np.zeros(10), [])
