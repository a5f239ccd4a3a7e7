"""
Services for the bookings app.

Usage:
    from bookings.services import RoomBalanceService, TransactionService
"""

from bookings.services.room_balance import (
    BalanceDiscrepancy,
    RoomBalanceService,
    RoomReconciliation,
)
from bookings.services.transaction_service import TransactionService

__all__ = [
    "BalanceDiscrepancy",
    "RoomBalanceService",
    "RoomReconciliation",
    "TransactionService",
]
