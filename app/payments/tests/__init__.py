"""
Tests for payments app.

This package contains test modules for:
- test_state_transitions.py / test_models.py: Payment model and lifecycle
- test_adapters.py / test_registry.py: UPP HTTP adapter and gateway registry
- test_router.py: PaymentRouter processing, history and statistics
- test_refund_service.py: RefundService
- test_tasks.py: Stale pending payment sweep
- test_integration.py: Payment journeys across bookings and payments

Usage:
    pytest app/payments/tests/
    pytest app/payments/tests/test_router.py
"""
