"""
Test Suite

This module contains all tests for the MTBM maintenance dashboard backend.

Structure:
    tests/
    ├── __init__.py         # This file
    ├── conftest.py         # Pytest fixtures (mongomock db, recording mail)
    ├── unit/               # Engine, utilities and media validation
    └── integration/        # API endpoint tests through TestClient

To run tests:
    pytest backend/tests/
    pytest backend/tests/unit/
    pytest backend/tests/integration/
"""
