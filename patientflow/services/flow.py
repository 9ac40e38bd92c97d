"""
Patient flow state machine.

``FlowEngine.set_status`` moves one visit to a new operational status.
The read of the current flow, the first-reached timestamp fill, the
history append and the appointment mirror all run in a single
transaction; the live notification goes out only after that
transaction commits and can never undo it.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone
from django.utils.module_loading import import_string

from patientflow.exceptions import (
    NotFound,
    NotificationDeliveryFailure,
    RoomOccupied,
    TransientStoreError,
    ValidationError,
)
from patientflow.models import (
    ExamRoom,
    FlowStatus,
    FlowStatusHistory,
    PatientFlow,
    STATUS_TIMESTAMP_FIELDS,
    TERMINAL_STATUSES,
    User,
)
from patientflow.services.appointments import AppointmentDirectory

logger = logging.getLogger(__name__)

_ORDER = list(FlowStatus.values)

# Used only when strict transitions are switched on.  Any forward move is
# allowed, plus walking back from checkout to the provider.
ALLOWED_TRANSITIONS = {
    status: set(_ORDER[idx + 1:]) for idx, status in enumerate(_ORDER)
}
ALLOWED_TRANSITIONS[FlowStatus.COMPLETED] = set()
ALLOWED_TRANSITIONS[FlowStatus.CHECKOUT].add(FlowStatus.WITH_PROVIDER)


def can_transition(current: Optional[str], new: str) -> bool:
    """Return True if a flow may move from ``current`` to ``new``."""
    if current is None or current == new:
        return True
    return new in ALLOWED_TRANSITIONS.get(current, set())


def _flow_settings() -> Dict[str, Any]:
    return getattr(settings, 'PATIENT_FLOW', {})


def flow_event(flow: PatientFlow, previous_status: Optional[str], now) -> Dict[str, Any]:
    return {
        'flowId': flow.id,
        'appointmentId': flow.appointment_id,
        'patientId': flow.patient_id,
        'roomId': flow.room_id,
        'status': flow.status,
        'previousStatus': previous_status,
        'statusChangedAt': flow.status_changed_at.isoformat(),
        'timestamp': now.isoformat(),
    }


class FlowEngine:
    """Applies status transitions for the visits of any tenant.

    ``publisher`` receives ``publish(tenant_id, event)`` once per
    committed transition; ``appointments`` is the appointment lookup and
    status-mirror collaborator; ``clock`` returns the current aware
    datetime.
    """

    def __init__(self, publisher, appointments=None, clock: Optional[Callable] = None,
                 strict_transitions: Optional[bool] = None,
                 enforce_room_exclusivity: Optional[bool] = None):
        conf = _flow_settings()
        self.publisher = publisher
        self.appointments = appointments or AppointmentDirectory()
        self.clock = clock or timezone.now
        self.strict_transitions = (
            conf.get('STRICT_TRANSITIONS', False) if strict_transitions is None else strict_transitions
        )
        self.enforce_room_exclusivity = (
            conf.get('ENFORCE_ROOM_EXCLUSIVITY', True)
            if enforce_room_exclusivity is None else enforce_room_exclusivity
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def set_status(self, tenant_id: str, appointment_id: str, new_status: str, *,
                   room_id: Optional[str] = None, actor: Optional[User] = None,
                   notes: Optional[str] = None) -> PatientFlow:
        if new_status not in STATUS_TIMESTAMP_FIELDS:
            raise ValidationError(f'Unknown flow status: {new_status}')

        try:
            with transaction.atomic():
                flow, previous_status, now = self._apply(
                    tenant_id, appointment_id, new_status, room_id=room_id, actor=actor, notes=notes
                )
                event = flow_event(flow, previous_status, now)
                transaction.on_commit(lambda: self._notify(tenant_id, event))
        except DatabaseError as exc:
            logger.error('Flow transition for appointment %s rolled back: %s', appointment_id, exc)
            raise TransientStoreError() from exc

        logger.info(
            'Flow %s (appointment %s): %s -> %s',
            flow.id, appointment_id, previous_status, new_status,
        )
        return flow

    def _apply(self, tenant_id, appointment_id, new_status, *, room_id, actor, notes):
        now = self.clock()
        flow = (
            PatientFlow.objects.select_for_update()
            .filter(tenant_id=tenant_id, appointment_id=appointment_id)
            .first()
        )
        room = self._claim_room(tenant_id, room_id, flow) if room_id else None
        ts_field = STATUS_TIMESTAMP_FIELDS[new_status]

        if flow is None:
            appointment = self.appointments.lookup(tenant_id, appointment_id, lock=True)
            previous_status = None
            duration = None
            flow = PatientFlow(
                tenant_id=tenant_id,
                appointment_id=appointment.id,
                patient_id=appointment.patient_id,
                assigned_provider_id=appointment.provider_id,
                status=new_status,
                status_changed_at=now,
                room=room,
                notes=notes or '',
                created_at=now,
            )
            setattr(flow, ts_field, now)
            flow.save(force_insert=True)
        else:
            previous_status = flow.status
            if self.strict_transitions and not can_transition(previous_status, new_status):
                raise ValidationError(f'Cannot move from {previous_status} to {new_status}')
            duration = max(0, int((now - flow.status_changed_at).total_seconds()))
            flow.status = new_status
            flow.status_changed_at = now
            if getattr(flow, ts_field) is None:
                setattr(flow, ts_field, now)
            if room is not None:
                flow.room = room
            if notes is not None:
                flow.notes = notes
            flow.save()

        FlowStatusHistory.objects.create(
            tenant_id=tenant_id,
            flow=flow,
            sequence=FlowStatusHistory.objects.filter(flow=flow).count() + 1,
            from_status=previous_status,
            to_status=new_status,
            changed_by=actor if getattr(actor, 'pk', None) else None,
            changed_at=now,
            room_id=flow.room_id,
            notes=notes or '',
            duration_seconds=duration,
        )
        self.appointments.mirror_status(tenant_id, flow.appointment_id, new_status, now=now)
        return flow, previous_status, now

    def _claim_room(self, tenant_id, room_id, flow: Optional[PatientFlow]) -> ExamRoom:
        """Lock the room row and check nobody else is in it today."""
        room = ExamRoom.objects.select_for_update().filter(tenant_id=tenant_id, id=room_id).first()
        if room is None:
            raise NotFound('Room not found')
        if self.enforce_room_exclusivity:
            today = timezone.localdate(self.clock())
            occupied = (
                PatientFlow.objects.filter(tenant_id=tenant_id, room=room, created_at__date=today)
                .exclude(status__in=TERMINAL_STATUSES)
            )
            if flow is not None:
                occupied = occupied.exclude(pk=flow.pk)
            if occupied.exists():
                raise RoomOccupied(f'Room {room.room_number} is occupied')
        return room

    def _notify(self, tenant_id: str, event: Dict[str, Any]) -> None:
        try:
            self.publisher.publish(tenant_id, event)
        except Exception as exc:
            failure = NotificationDeliveryFailure(f'flow event {event.get("flowId")} not delivered')
            logger.warning('%s: %s', failure, exc, exc_info=exc)

    # ------------------------------------------------------------------
    # Non-status fields
    # ------------------------------------------------------------------

    def update_flow(self, tenant_id: str, appointment_id: str, *, priority: Optional[str] = None,
                    assigned_ma_id: Optional[int] = None, assigned_provider_id: Optional[int] = None,
                    notes: Optional[str] = None) -> PatientFlow:
        changes = {
            'priority': priority,
            'assigned_ma_id': assigned_ma_id,
            'assigned_provider_id': assigned_provider_id,
            'notes': notes,
        }
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            raise ValidationError('No fields to update')
        if 'priority' in changes and changes['priority'] not in dict(PatientFlow.PRIORITY_CHOICES):
            raise ValidationError(f'Unknown priority: {priority}')

        try:
            with transaction.atomic():
                flow = (
                    PatientFlow.objects.select_for_update()
                    .filter(tenant_id=tenant_id, appointment_id=appointment_id)
                    .first()
                )
                if flow is None:
                    raise NotFound('Patient flow not found')
                for field in ('assigned_ma_id', 'assigned_provider_id'):
                    if field in changes and not User.objects.filter(
                        id=changes[field], tenant_id=tenant_id
                    ).exists():
                        raise NotFound('Staff member not found')
                for field, value in changes.items():
                    setattr(flow, field, value)
                flow.save(update_fields=[*changes, 'updated_at'])
        except DatabaseError as exc:
            logger.error('Flow update for appointment %s rolled back: %s', appointment_id, exc)
            raise TransientStoreError() from exc
        return flow


def get_flow_engine(publisher=None) -> FlowEngine:
    """Build an engine with the publisher named in ``PATIENT_FLOW``."""
    if publisher is None:
        path = _flow_settings().get('PUBLISHER', 'patientflow.realtime.publisher.ChannelLayerPublisher')
        publisher = import_string(path)()
    return FlowEngine(publisher)
