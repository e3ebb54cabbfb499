"""
Test suite for Wine Portal.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_pricing_service.py -v
"""
