"""Pytest configuration for the kernel tests: hypothesis profiles for the property tests in tests/pure/test_properties.py.

Pick a profile with HYPOTHESIS_PROFILE (default, ci or thorough).
"""

import os

from hypothesis import HealthCheck, settings

settings.register_profile("default", max_examples=200, print_blob=True)
settings.register_profile("ci", max_examples=200, print_blob=True, derandomize=True)
settings.register_profile(
    "thorough", max_examples=2000, print_blob=True, suppress_health_check=[HealthCheck.too_slow]
)

settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "default"))
