"""Test suite for the loco-cucumber package.

This package contains unit and integration tests validating step
registration and matching, failure isolation, outline interpolation,
scenario filtering, feature parsing, and end-to-end execution.
"""
