"""
Celery tasks for the bookings app.

Tasks:
- reconcile_room_balances: Periodic integrity check of every active room
- reconcile_single_room: On-demand check of one room

Usage:
    from bookings.tasks import reconcile_room_balances, reconcile_single_room

    # Typically run by celery-beat (see CELERY_BEAT_SCHEDULE in settings)
    reconcile_room_balances.delay()

    # Check one room after a manual correction
    reconcile_single_room.delay(str(room.id))
"""

from __future__ import annotations

import logging

from celery import shared_task

from bookings.models import Room
from bookings.services import RoomBalanceService

logger = logging.getLogger(__name__)


@shared_task(bind=True)
def reconcile_room_balances(self) -> dict:
    """
    Reconcile every active room against its transaction history.

    Returns:
        Dict with counts of rooms checked, inconsistent rooms, and the ids
        of the inconsistent rooms
    """
    rooms_checked = 0
    inconsistent: list[str] = []

    for room_id in Room.objects.filter(is_active=True).values_list("id", flat=True):
        result = RoomBalanceService.reconcile_room(room_id)
        rooms_checked += 1
        if not result.success:
            logger.warning(
                "Room disappeared during reconciliation",
                extra={"room_id": str(room_id), "error": result.error},
            )
            continue
        if not result.data.is_consistent:
            inconsistent.append(str(room_id))

    log = logger.error if inconsistent else logger.info
    log(
        "Room balance reconciliation finished",
        extra={
            "rooms_checked": rooms_checked,
            "inconsistent_rooms": len(inconsistent),
        },
    )
    return {
        "status": "completed",
        "rooms_checked": rooms_checked,
        "inconsistent_rooms": len(inconsistent),
        "inconsistent_room_ids": inconsistent,
    }


@shared_task
def reconcile_single_room(room_id: str) -> dict:
    """Reconcile one room and return the report as a dict."""
    result = RoomBalanceService.reconcile_room(room_id)
    if not result.success:
        return {"status": "not_found", "room_id": room_id, "error": result.error}
    return {"status": "completed", **result.data.to_dict()}
