"""
Read-only views over the live flow table.

Room board, provider queue, wait-time statistics and flow history are
computed from the current rows on every call.  Nothing here writes or
caches; "today" is the local date of ``now`` in the configured zone.
"""
from __future__ import annotations

from typing import Optional

from django.db.models import Case, Count, F, IntegerField, Q, Value, When
from django.utils import timezone

from patientflow.models import (
    FlowStatus,
    FlowStatusHistory,
    Location,
    PatientFlow,
    RoomAssignment,
    TERMINAL_STATUSES,
)
from patientflow.services.rooms import format_room, list_rooms

PROVIDER_QUEUE_STATUSES = (
    FlowStatus.VITALS_COMPLETE,
    FlowStatus.READY_FOR_PROVIDER,
    FlowStatus.WITH_PROVIDER,
)

PRIORITY_RANK = {'urgent': 1, 'add-on': 2, 'normal': 3}

# (output key, start timestamp, end timestamp)
WAIT_INTERVALS = (
    ('avgCheckinToRooming', 'checked_in_at', 'rooming_at'),
    ('avgRoomingToVitals', 'rooming_at', 'vitals_complete_at'),
    ('avgVitalsToProvider', 'ready_for_provider_at', 'with_provider_at'),
    ('avgProviderToCheckout', 'with_provider_at', 'completed_at'),
    ('avgTotalVisitTime', 'checked_in_at', 'completed_at'),
)


def _minutes_since(moment, now) -> int:
    return int((now - moment).total_seconds() // 60)


def _todays_flows(tenant_id: str, now):
    return PatientFlow.objects.filter(tenant_id=tenant_id, created_at__date=timezone.localdate(now))


def _day_of_week(day) -> int:
    """Sunday-based weekday number used by room assignments."""
    return (day.weekday() + 1) % 7


def _assignments_for_today(tenant_id: str, room_ids, now) -> dict:
    today = timezone.localdate(now)
    current_slot = 'am' if timezone.localtime(now).hour < 12 else 'pm'
    qs = (
        RoomAssignment.objects.filter(
            tenant_id=tenant_id,
            room_id__in=room_ids,
            day_of_week=_day_of_week(today),
            is_active=True,
            time_slot__in=('all_day', current_slot),
        )
        .filter(Q(effective_date__isnull=True) | Q(effective_date__lte=today))
        .filter(Q(end_date__isnull=True) | Q(end_date__gte=today))
        .select_related('provider')
    )
    by_room: dict = {}
    for assignment in qs:
        held = by_room.get(assignment.room_id)
        # A half-day assignment beats the all-day one.
        if held is None or (held.time_slot == 'all_day' and assignment.time_slot != 'all_day'):
            by_room[assignment.room_id] = assignment
    return {
        room_id: {'id': a.provider_id, 'name': a.provider.display_name}
        for room_id, a in by_room.items()
    }


def get_room_board(tenant_id: str, location_id: str, *, now=None) -> list[dict]:
    """One entry per active room at the location, occupied or not."""
    now = now or timezone.now()
    rooms = list_rooms(tenant_id, location_id, active_only=True)
    room_ids = [r.id for r in rooms]

    flows = (
        _todays_flows(tenant_id, now)
        .filter(room_id__in=room_ids)
        .exclude(status__in=TERMINAL_STATUSES)
        .select_related('patient', 'appointment', 'assigned_provider', 'assigned_ma')
        .order_by('-status_changed_at')
    )
    # Ordered newest first so the longest-standing occupant wins a tie.
    occupants = {flow.room_id: flow for flow in flows}
    assignments = _assignments_for_today(tenant_id, room_ids, now)

    board: list[dict] = []
    for room in rooms:
        entry: dict = {'room': format_room(room)}
        flow = occupants.get(room.id)
        if flow is not None:
            entry['currentPatient'] = {
                'flowId': flow.id,
                'patientId': flow.patient_id,
                'patientName': flow.patient.full_name,
                'appointmentId': flow.appointment_id,
                'appointmentType': flow.appointment.appointment_type,
                'status': flow.status,
                'statusChangedAt': flow.status_changed_at.isoformat(),
                'waitTimeMinutes': _minutes_since(flow.status_changed_at, now),
                'providerName': flow.assigned_provider.display_name if flow.assigned_provider else None,
                'maName': flow.assigned_ma.display_name if flow.assigned_ma else None,
                'priority': flow.priority,
            }
        if room.id in assignments:
            entry['assignedProvider'] = assignments[room.id]
        board.append(entry)
    return board


def get_provider_queue(tenant_id: str, provider_id, *, now=None) -> list[dict]:
    """Today's visits waiting for or with the provider, most pressing first."""
    now = now or timezone.now()
    priority_rank = Case(
        *[When(priority=p, then=Value(rank)) for p, rank in PRIORITY_RANK.items()],
        default=Value(len(PRIORITY_RANK)),
        output_field=IntegerField(),
    )
    flows = (
        _todays_flows(tenant_id, now)
        .filter(assigned_provider_id=provider_id, status__in=PROVIDER_QUEUE_STATUSES)
        .select_related('patient', 'appointment', 'room')
        .annotate(priority_rank=priority_rank)
        .order_by(
            'priority_rank',
            F('ready_for_provider_at').asc(nulls_last=True),
            'appointment__scheduled_start',
        )
    )
    return [
        {
            'flowId': flow.id,
            'patientId': flow.patient_id,
            'patientName': flow.patient.full_name,
            'appointmentId': flow.appointment_id,
            'appointmentType': flow.appointment.appointment_type,
            'scheduledTime': flow.appointment.scheduled_start.isoformat(),
            'status': flow.status,
            'roomNumber': flow.room.room_number if flow.room else None,
            'roomName': flow.room.room_name if flow.room else None,
            'waitTimeMinutes': _minutes_since(flow.status_changed_at, now),
            'priority': flow.priority,
        }
        for flow in flows
    ]


def _average_minutes(flows: list[dict], start: str, end: str) -> Optional[float]:
    spans = [
        (row[end] - row[start]).total_seconds() / 60
        for row in flows
        if row[start] is not None and row[end] is not None
    ]
    if not spans:
        return None
    return round(sum(spans) / len(spans), 1)


def get_wait_times(tenant_id: str, location_id: Optional[str] = None, *, now=None) -> list[dict]:
    """Per-location stage averages (minutes) over today's visits, plus live counts."""
    now = now or timezone.now()
    locations = Location.objects.filter(tenant_id=tenant_id).order_by('name')
    if location_id:
        locations = locations.filter(id=location_id)

    todays = _todays_flows(tenant_id, now)
    fields = {f for _, start, end in WAIT_INTERVALS for f in (start, end)}
    rows_by_location: dict = {}
    for row in todays.values('appointment__location_id', *fields):
        rows_by_location.setdefault(row['appointment__location_id'], []).append(row)

    counts = {
        row['appointment__location_id']: row
        for row in todays.exclude(status__in=TERMINAL_STATUSES)
        .values('appointment__location_id')
        .annotate(
            waiting=Count('id', filter=~Q(status=FlowStatus.WITH_PROVIDER)),
            with_provider=Count('id', filter=Q(status=FlowStatus.WITH_PROVIDER)),
        )
        .order_by()
    }

    stats: list[dict] = []
    for location in locations:
        rows = rows_by_location.get(location.id, [])
        live = counts.get(location.id, {})
        entry = {'locationId': location.id, 'locationName': location.name}
        for key, start, end in WAIT_INTERVALS:
            entry[key] = _average_minutes(rows, start, end)
        entry['currentWaitingCount'] = live.get('waiting', 0)
        entry['currentWithProviderCount'] = live.get('with_provider', 0)
        stats.append(entry)
    return stats


def get_flow_history(tenant_id: str, appointment_id: str) -> list[dict]:
    history = (
        FlowStatusHistory.objects.filter(flow__tenant_id=tenant_id, flow__appointment_id=appointment_id)
        .select_related('changed_by')
        .order_by('sequence')
    )
    items: list[dict] = []
    for h in history:
        item = {
            'id': h.id,
            'flowId': h.flow_id,
            'sequence': h.sequence,
            'fromStatus': h.from_status,
            'toStatus': h.to_status,
            'changedBy': h.changed_by_id,
            'changedAt': h.changed_at.isoformat(),
            'roomId': h.room_id,
            'notes': h.notes or None,
            'durationSeconds': h.duration_seconds,
        }
        if h.changed_by is not None:
            item['changedByName'] = h.changed_by.display_name
        items.append(item)
    return items


def get_active_flows(tenant_id: str, location_id: Optional[str] = None, *, now=None) -> list[PatientFlow]:
    now = now or timezone.now()
    qs = _todays_flows(tenant_id, now).exclude(status__in=TERMINAL_STATUSES)
    if location_id:
        qs = qs.filter(appointment__location_id=location_id)
    return list(qs.select_related('room').order_by('created_at'))


def format_flow(flow: PatientFlow) -> dict:
    def iso(value):
        return value.isoformat() if value else None

    return {
        'id': flow.id,
        'tenantId': flow.tenant_id,
        'appointmentId': flow.appointment_id,
        'patientId': flow.patient_id,
        'roomId': flow.room_id,
        'status': flow.status,
        'statusChangedAt': iso(flow.status_changed_at),
        'checkedInAt': iso(flow.checked_in_at),
        'roomingAt': iso(flow.rooming_at),
        'vitalsCompleteAt': iso(flow.vitals_complete_at),
        'readyForProviderAt': iso(flow.ready_for_provider_at),
        'withProviderAt': iso(flow.with_provider_at),
        'checkoutAt': iso(flow.checkout_at),
        'completedAt': iso(flow.completed_at),
        'assignedProviderId': flow.assigned_provider_id,
        'assignedMaId': flow.assigned_ma_id,
        'priority': flow.priority,
        'notes': flow.notes or None,
        'createdAt': iso(flow.created_at),
        'updatedAt': iso(flow.updated_at),
    }
