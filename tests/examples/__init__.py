"""Example step definitions and features used by the test suite."""
