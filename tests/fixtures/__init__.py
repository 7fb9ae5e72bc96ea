"""
Test Fixtures and Utilities

Builders for synthetic statement files used across the suite.
"""
