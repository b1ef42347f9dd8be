"""
Domain event publishing.

Visit state changes are announced on an SNS topic as HMPPS domain events so
that other services (notifications, legacy sync) can react. Publishing never
fails the calling operation: errors are logged and swallowed here.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from visit_scheduler.core.logging_config import get_logger
from visit_scheduler.core.models.domain import Visit
from visit_scheduler.server.core.config import DomainEventsConfig

logger = get_logger(__name__)

LONDON = ZoneInfo("Europe/London")

VISIT_BOOKED = "prison-visit.booked"
VISIT_CHANGED = "prison-visit.changed"
VISIT_CANCELLED = "prison-visit.cancelled"
VISIT_REQUEST_APPROVED = "prison-visit-request.approved"

_DESCRIPTIONS = {
    VISIT_BOOKED: "Prison Visit Booked",
    VISIT_CHANGED: "Prison Visit Changed",
    VISIT_CANCELLED: "Prison Visit Cancelled",
    VISIT_REQUEST_APPROVED: "Prison Visit Request Approved",
}


def get_sns_client(config: DomainEventsConfig):
    """Get configured boto3 client for the domain events topic"""
    return boto3.client(
        "sns",
        region_name=config.region,
        endpoint_url=config.endpoint_url,
    )


def build_domain_event(event_type: str, prisoner_id: str, reference: str, occurred_at: Optional[datetime] = None) -> Dict[str, Any]:
    occurred = (occurred_at or datetime.now(LONDON)).astimezone(LONDON)
    return {
        "eventType": event_type,
        "version": 1,
        "description": _DESCRIPTIONS.get(event_type, event_type),
        "occurredAt": occurred.isoformat(),
        "prisonerId": prisoner_id,
        "additionalInformation": {"reference": reference},
    }


class DomainEventPublisher:
    """Publish visit domain events to SNS when enabled."""

    def __init__(self, config: DomainEventsConfig, client: Any = None) -> None:
        self._config = config
        self._client = client

    @property
    def enabled(self) -> bool:
        return self._config.enabled and bool(self._config.topic_arn)

    def _sns(self):
        if self._client is None:
            self._client = get_sns_client(self._config)
        return self._client

    def _publish(self, event: Dict[str, Any]) -> None:
        self._sns().publish(
            TopicArn=self._config.topic_arn,
            Message=json.dumps(event),
            MessageAttributes={"eventType": {"DataType": "String", "StringValue": event["eventType"]}},
        )

    async def publish(self, event_type: str, visit: Visit) -> bool:
        """Publish one event for ``visit``.

        Returns:
            True when the event was sent
        """
        if not self.enabled:
            logger.debug(f"Domain events disabled, skipping {event_type} for {visit.reference}")
            return False

        event = build_domain_event(event_type, visit.prisoner_id, visit.reference)
        try:
            await asyncio.to_thread(self._publish, event)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to publish domain event {event_type} for visit {visit.reference}: {e}")
            return False
        logger.info(f"Published domain event {event_type} for visit {visit.reference}")
        return True

    async def send_visit_booked_event(self, visit: Visit) -> bool:
        return await self.publish(VISIT_BOOKED, visit)

    async def send_visit_changed_event(self, visit: Visit) -> bool:
        return await self.publish(VISIT_CHANGED, visit)

    async def send_visit_cancelled_event(self, visit: Visit) -> bool:
        return await self.publish(VISIT_CANCELLED, visit)

    async def send_visit_request_approved_event(self, visit: Visit) -> bool:
        return await self.publish(VISIT_REQUEST_APPROVED, visit)
