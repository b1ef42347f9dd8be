"""
Slot capacity checks.

Capacity is defined per restriction on the session template. Visits booked
in the slot always count against it; reserved, unexpired applications count
when the caller asks for them.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Optional

from visit_scheduler.core import monitoring
from visit_scheduler.core.database import SqlRepoBundle
from visit_scheduler.core.database.base import now
from visit_scheduler.core.database.entities import SessionSlotRow
from visit_scheduler.core.exceptions import ItemNotFoundError, OverCapacityError
from visit_scheduler.core.logging_config import get_logger
from visit_scheduler.core.models.domain import VisitRestriction

logger = get_logger(__name__)


class SlotCapacityService:
    def __init__(
        self,
        repos: SqlRepoBundle,
        *,
        expired_application_minutes: int = 10,
        clock: Callable[[], datetime] = now,
    ) -> None:
        self._repos = repos
        self._expired_application_minutes = expired_application_minutes
        self._clock = clock

    def active_since(self) -> datetime:
        """Applications modified before this moment have expired."""
        return self._clock() - timedelta(minutes=self._expired_application_minutes)

    async def _slot(self, slot_reference: str) -> SessionSlotRow:
        slot = await self._repos.session_slots.get_by_reference(slot_reference)
        if slot is None:
            raise ItemNotFoundError(f"Session slot reference {slot_reference} not found")
        return slot

    async def get_slot_capacity(self, slot: SessionSlotRow, restriction: VisitRestriction) -> Optional[int]:
        """Capacity for ``restriction``, or None when the slot is not capacity checked."""
        if slot.session_template_reference is None or restriction == VisitRestriction.UNKNOWN:
            return None
        template = await self._repos.session_templates.get_by_reference(slot.session_template_reference)
        if template is None:
            return None
        return template.open_capacity if restriction == VisitRestriction.OPEN else template.closed_capacity

    async def check_capacity_for_booking(
        self,
        slot_reference: str,
        restriction: VisitRestriction,
        include_reserved_applications: bool,
        exclude_application_reference: Optional[str] = None,
    ) -> None:
        """Raise ``OverCapacityError`` when the slot is already full.

        Args:
            slot_reference: Slot being booked
            restriction: Open or closed capacity to check
            include_reserved_applications: Count in-progress reservations too
            exclude_application_reference: Application to leave out of the count
        """
        slot = await self._slot(slot_reference)
        capacity = await self.get_slot_capacity(slot, restriction)
        if capacity is None:
            return

        taken = await self._repos.visits.count_booked_for_slot(slot.id, restriction)
        if include_reserved_applications:
            taken += await self._repos.applications.count_reserved_for_slot(
                slot.id, restriction, self.active_since(), exclude_application_reference
            )

        if taken >= capacity:
            monitoring.track_event(
                "over-capacity",
                {"sessionSlot": slot.reference, "restriction": restriction.value, "taken": taken, "capacity": capacity},
            )
            logger.info(f"Over capacity for session slot {slot.reference}: {taken} of {capacity} {restriction.value}")
            raise OverCapacityError(
                f"Over capacity for time slot {slot.reference}",
                details={"sessionSlot": slot.reference, "restriction": restriction.value, "capacity": capacity},
            )

    async def check_capacity_for_application_reservation(
        self, slot_reference: str, restriction: VisitRestriction, exclude_application_reference: Optional[str] = None
    ) -> None:
        await self.check_capacity_for_booking(
            slot_reference, restriction, True, exclude_application_reference=exclude_application_reference
        )
