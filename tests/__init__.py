"""
Test package for the object mapper.

- unit/: Unit tests for individual components

Run tests with:
    pytest tests/                    # All tests
    pytest tests/unit/              # Unit tests only
"""
