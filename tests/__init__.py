"""Test suite for the cuke-core package.

This package contains unit and integration tests validating tag
filtering, scenario outline expansion, step matching, hook execution,
data table views and document loading.
"""
