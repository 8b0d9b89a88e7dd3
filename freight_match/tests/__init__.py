"""
Tests Package

Test suite for the freight matching service.

Modules:
- test_algorithms: Tests for pure algorithm functions
- test_services: Tests for the store, cache, verification, assignment and dispatch
- test_fmcsa_client: Tests for FMCSA response mapping and error handling
- test_core: Tests for settings, logging and the error taxonomy
- test_api: Tests for FastAPI endpoints

Run all tests:
    pytest freight_match/tests/

Run specific test file:
    pytest freight_match/tests/test_algorithms.py -v
"""
