"""
Tests for host-side validation of network output.
"""

import logging

import pytest
import numpy as np
from py_sortnet import is_sorted, reference_sort, validate_sort

class TestReferenceSort:

    def test_batches_sorted_independently(self):
        keys = np.array([4, 3, 2, 1, 8, 7, 6, 5])
        np.testing.assert_array_equal(reference_sort(keys, 4), [1, 2, 3, 4, 5, 6, 7, 8])

    def test_descending(self):
        keys = np.array([[1, 3, 2, 0]])
        np.testing.assert_array_equal(reference_sort(keys, ascending=False), [[3, 2, 1, 0]])

    def test_does_not_modify_input(self):
        keys = np.array([2, 1])
        reference_sort(keys)
        np.testing.assert_array_equal(keys, [2, 1])

    def test_partial_batch_rejected(self):
        with pytest.raises(ValueError):
            reference_sort(np.arange(6), 4)

class TestIsSorted:

    def test_ascending(self):
        assert is_sorted(np.array([1, 1, 2, 3]))
        assert not is_sorted(np.array([1, 3, 2, 4]))

    def test_per_batch(self):
        assert is_sorted(np.array([3, 4, 1, 2]), 2)
        assert not is_sorted(np.array([3, 4, 1, 2]), 4)

    def test_descending(self):
        assert is_sorted(np.array([[9, 5, 5, 0]]), ascending=False)

    def test_empty(self):
        assert is_sorted(np.array([], dtype=np.int32))

class TestValidateSort:

    def test_match(self):
        keys_in = np.array([3, 1, 4, 1, 5, 9, 2, 6])
        values_in = np.arange(8)
        out_keys = np.array([1, 1, 2, 3, 4, 5, 6, 9])
        out_values = np.array([3, 1, 6, 0, 2, 4, 7, 5])
        ref = reference_sort(keys_in)
        assert validate_sort(out_keys, out_values, ref, keys_in, values_in) == 0

    def test_key_mismatches_counted_per_position(self):
        ref = np.array([1, 2, 3, 4])
        out = np.array([2, 1, 3, 4])
        assert validate_sort(out, None, ref) == 2

    def test_broken_binding_counted_per_batch(self):
        keys_in = np.array([[2, 1], [4, 3]])
        values_in = np.array([[0, 1], [0, 1]])
        out_keys = np.array([[1, 2], [3, 4]])
        # keys right, values not moved with them in both batches
        out_values = np.array([[0, 1], [0, 1]])
        ref = reference_sort(keys_in)
        assert validate_sort(out_keys, out_values, ref, keys_in, values_in) == 2

    def test_binding_check_skipped_without_inputs(self):
        ref = np.array([1, 2])
        assert validate_sort(np.array([1, 2]), np.array([9, 9]), ref) == 0

    def test_shape_mismatch(self):
        with pytest.raises(ValueError, match="Shapes do not match"):
            validate_sort(np.arange(4), None, np.arange(8))

    def test_verbose_logs_sequences(self, caplog):
        ref = np.array([1, 2, 3, 4])
        out = np.array([1, 2, 4, 3])
        with caplog.at_level(logging.INFO, logger="py_sortnet.validation"):
            assert validate_sort(out, None, ref, verbose=True) == 2
        assert "Validation failed" in caplog.text
        assert "[1, 2, 4, 3]" in caplog.text
        assert "[1, 2, 3, 4]" in caplog.text
