"""Conversions between database rows and domain models."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from visit_scheduler.core.database.entities import (
    ApplicationRow,
    EventAuditRow,
    SessionSlotRow,
    SessionTemplateRow,
    VisitRow,
)
from visit_scheduler.core.models.domain import (
    Application,
    Contact,
    EventAudit,
    SessionTemplate,
    Visit,
    Visitor,
    VisitNote,
    VisitorSupport,
)


def template_to_domain(row: SessionTemplateRow, prison_code: str) -> SessionTemplate:
    return SessionTemplate(
        reference=row.reference,
        prison_code=prison_code,
        name=row.name,
        visit_room=row.visit_room,
        visit_type=row.visit_type,
        day_of_week=row.day_of_week,
        start_time=row.start_time,
        end_time=row.end_time,
        valid_from_date=row.valid_from_date,
        valid_to_date=row.valid_to_date,
        open_capacity=row.open_capacity,
        closed_capacity=row.closed_capacity,
        weekly_frequency=row.weekly_frequency,
        active=row.active,
        include_location_group_type=row.include_location_group_type,
        include_category_group_type=row.include_category_group_type,
        include_incentive_group_type=row.include_incentive_group_type,
        location_groups=row.location_groups or [],
        category_groups=row.category_groups or [],
        incentive_groups=row.incentive_groups or [],
        exclude_dates=row.exclude_dates or [],
    )


def dump_contact(contact: Optional[Contact]) -> Optional[Dict[str, Any]]:
    return contact.model_dump(mode="json") if contact else None


def dump_visitors(visitors: Optional[List[Visitor]]) -> List[Dict[str, Any]]:
    return [v.model_dump(mode="json") for v in visitors or []]


def dump_support(support: Optional[VisitorSupport]) -> Optional[Dict[str, Any]]:
    return support.model_dump(mode="json") if support else None


def dump_notes(notes: Optional[List[VisitNote]]) -> List[Dict[str, Any]]:
    return [n.model_dump(mode="json") for n in notes or []]


def application_to_domain(row: ApplicationRow, slot: SessionSlotRow, prison_code: str) -> Application:
    return Application(
        reference=row.reference,
        prison_code=prison_code,
        prisoner_id=row.prisoner_id,
        session_template_reference=slot.session_template_reference,
        visit_type=row.visit_type,
        visit_restriction=row.restriction,
        start_timestamp=slot.slot_start,
        end_timestamp=slot.slot_end,
        reserved_slot=row.reserved_slot,
        reservation_status=row.reservation_status,
        application_status=row.application_status.value,
        completed=row.completed,
        user_type=row.user_type,
        created_by=row.created_by,
        visit_contact=Contact.model_validate(row.contact) if row.contact else None,
        visitors=[Visitor.model_validate(v) for v in row.visitors or []],
        visitor_support=VisitorSupport.model_validate(row.support) if row.support else None,
        created_timestamp=row.create_timestamp,
        modified_timestamp=row.modify_timestamp,
    )


def visit_to_domain(
    row: VisitRow,
    slot: SessionSlotRow,
    prison_code: str,
    application_reference: Optional[str] = None,
) -> Visit:
    contact = None
    if row.main_contact_name:
        contact = Contact(name=row.main_contact_name, telephone=row.main_contact_phone, email=row.main_contact_email)
    return Visit(
        reference=row.reference,
        application_reference=application_reference,
        prisoner_id=row.prisoner_id,
        prison_code=prison_code,
        session_template_reference=slot.session_template_reference,
        visit_room=row.visit_room,
        visit_type=row.visit_type,
        visit_status=row.visit_status,
        visit_sub_status=row.visit_sub_status,
        outcome_status=row.outcome_status,
        visit_restriction=row.visit_restriction,
        start_timestamp=slot.slot_start,
        end_timestamp=slot.slot_end,
        visit_notes=[VisitNote.model_validate(n) for n in row.notes or []],
        visit_contact=contact,
        visitors=[Visitor.model_validate(v) for v in row.visitors or []],
        visitor_support=VisitorSupport.model_validate(row.support) if row.support else None,
        user_type=row.user_type,
        created_timestamp=row.create_timestamp,
        modified_timestamp=row.modify_timestamp,
    )


def event_audit_to_domain(row: EventAuditRow) -> EventAudit:
    return EventAudit(
        type=row.type,
        application_method_type=row.application_method_type,
        actioned_by=row.actioned_by,
        user_type=row.user_type,
        booking_reference=row.booking_reference,
        application_reference=row.application_reference,
        session_template_reference=row.session_template_reference,
        text=row.text,
        create_timestamp=row.create_timestamp,
    )
