"""
Testing package for CB Dummy.

This package contains:
- Unit tests for the storage backends and helpers
- Integration tests for the API, capture and dashboard endpoints
- Test fixtures in conftest.py
"""
