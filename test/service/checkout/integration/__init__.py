"""
Checkout Integration Tests

These tests run the repositories against a real PostgreSQL database
(`seat_checkout_test_db`) and are skipped when it cannot be reached.
"""
