"""Unit tests for SNS domain event publishing."""

from __future__ import annotations

import json
from datetime import datetime
from unittest.mock import MagicMock

from botocore.exceptions import ClientError

from visit_scheduler.core.models.domain import (
    UserType,
    Visit,
    VisitRestriction,
    VisitStatus,
    VisitSubStatus,
    VisitType,
)
from visit_scheduler.server.core.config import DomainEventsConfig
from visit_scheduler.services.domain_events import (
    VISIT_BOOKED,
    VISIT_REQUEST_APPROVED,
    DomainEventPublisher,
    build_domain_event,
)


def _visit() -> Visit:
    start = datetime(2024, 5, 1, 13, 0)
    return Visit(
        reference="ab-cd-ef-gh",
        prisoner_id="A1234AA",
        prison_code="HEI",
        visit_room="Visits Main Hall",
        visit_type=VisitType.SOCIAL,
        visit_status=VisitStatus.BOOKED,
        visit_sub_status=VisitSubStatus.AUTO_APPROVED,
        visit_restriction=VisitRestriction.OPEN,
        start_timestamp=start,
        end_timestamp=start.replace(hour=15),
        user_type=UserType.STAFF,
        created_timestamp=start,
        modified_timestamp=start,
    )


def test_build_domain_event():
    event = build_domain_event(VISIT_BOOKED, "A1234AA", "ab-cd-ef-gh")

    assert event["eventType"] == "prison-visit.booked"
    assert event["version"] == 1
    assert event["description"] == "Prison Visit Booked"
    assert event["prisonerId"] == "A1234AA"
    assert event["additionalInformation"] == {"reference": "ab-cd-ef-gh"}
    assert datetime.fromisoformat(event["occurredAt"]).tzinfo is not None


class TestDomainEventPublisher:
    async def test_publishes_to_topic(self, domain_events_config, sns_client):
        publisher = DomainEventPublisher(domain_events_config, client=sns_client)

        assert await publisher.send_visit_request_approved_event(_visit()) is True

        kwargs = sns_client.publish.call_args.kwargs
        assert kwargs["TopicArn"] == domain_events_config.topic_arn
        assert kwargs["MessageAttributes"]["eventType"] == {"DataType": "String", "StringValue": VISIT_REQUEST_APPROVED}
        assert json.loads(kwargs["Message"])["additionalInformation"]["reference"] == "ab-cd-ef-gh"

    async def test_disabled_publisher_does_nothing(self, sns_client):
        publisher = DomainEventPublisher(DomainEventsConfig(enabled=False), client=sns_client)

        assert await publisher.send_visit_booked_event(_visit()) is False
        sns_client.publish.assert_not_called()

    async def test_missing_topic_counts_as_disabled(self, sns_client):
        publisher = DomainEventPublisher(DomainEventsConfig(enabled=True), client=sns_client)

        assert publisher.enabled is False
        assert await publisher.send_visit_cancelled_event(_visit()) is False

    async def test_publish_failure_is_logged(self, domain_events_config, caplog):
        client = MagicMock()
        client.publish.side_effect = ClientError(
            {"Error": {"Code": "NotFound", "Message": "Topic does not exist"}}, "Publish"
        )
        publisher = DomainEventPublisher(domain_events_config, client=client)

        assert await publisher.send_visit_changed_event(_visit()) is False
        assert "Failed to publish domain event prison-visit.changed" in caplog.text
