"""Regression tests for complete headers.

Each .test file in cases/ contains:
- WebGPU XML schema (top section)
- Expected C header (bottom section, after ---)

Tests verify the output matches the expected header EXACTLY.
"""

import glob
import os

import pytest

from test.assertions import assert_test_file_equals

CASES_DIR = os.path.join(os.path.dirname(__file__), "cases")


def get_test_cases():
    """Get all regression test cases."""
    return sorted(glob.glob(os.path.join(CASES_DIR, "*.test")))


@pytest.mark.parametrize("file_path", get_test_cases(), ids=lambda p: os.path.basename(p))
def test_regression(file_path):
    """Test regression case end to end."""
    assert_test_file_equals(file_path)
