"""
Integration tests for keyshift.

These tests migrate between two Redis Stack servers started with
testcontainers. They are skipped automatically if Docker or testcontainers
is not available.

Run integration tests:
    pytest tests/integration/ -v

Skip integration tests:
    pytest tests/ -v -m "not integration"
"""
