"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of an SGX market.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_quote_properties.py - Quote monotonicity, spread, purity
2. test_lock_properties.py - At most one lock per side, lock limit, rejections leave state untouched
3. test_token_properties.py - Deterministic tokens, expiry is final
4. test_timeout_properties.py - Abandoned locks are always released

These tests use hypothesis for property-based testing.
"""
