"""
Exam room registry and provider room assignments.

Rooms are never deleted, only deactivated.  Assignments record whose
room it normally is on a given weekday; they annotate the room board
and never reserve the room.
"""
from typing import Optional

from django.utils import timezone

from patientflow.exceptions import NotFound, ValidationError
from patientflow.models import ExamRoom, Location, RoomAssignment, User

ROOM_PATCH_FIELDS = (
    'room_name', 'room_number', 'room_type', 'is_active', 'equipment', 'notes', 'display_order',
)
ROOM_TYPES = {choice for choice, _ in ExamRoom.ROOM_TYPE_CHOICES}
TIME_SLOTS = {choice for choice, _ in RoomAssignment.TIME_SLOT_CHOICES}


def format_room(room: ExamRoom) -> dict:
    return {
        'id': room.id,
        'tenantId': room.tenant_id,
        'roomName': room.room_name,
        'roomNumber': room.room_number,
        'locationId': room.location_id,
        'locationName': room.location.name if room.location_id else None,
        'roomType': room.room_type,
        'isActive': room.is_active,
        'displayOrder': room.display_order,
        'equipment': list(room.equipment or []),
        'notes': room.notes or None,
        'createdAt': room.created_at.isoformat() if room.created_at else None,
        'updatedAt': room.updated_at.isoformat() if room.updated_at else None,
    }


def list_rooms(tenant_id: str, location_id: Optional[str] = None, *, active_only: bool = False) -> list[ExamRoom]:
    qs = ExamRoom.objects.filter(tenant_id=tenant_id).select_related('location')
    if location_id:
        qs = qs.filter(location_id=location_id)
    if active_only:
        qs = qs.filter(is_active=True)
    return list(qs.order_by('display_order', 'room_number'))


def create_room(tenant_id: str, *, location_id: str, room_name: str, room_number: str,
                room_type: str = 'exam', equipment=None, notes: str = '', display_order: int = 0) -> ExamRoom:
    if room_type not in ROOM_TYPES:
        raise ValidationError(f'Unknown room type: {room_type}')
    location = Location.objects.filter(tenant_id=tenant_id, id=location_id).first()
    if location is None:
        raise NotFound('Location not found')
    return ExamRoom.objects.create(
        tenant_id=tenant_id,
        location=location,
        room_name=room_name,
        room_number=room_number,
        room_type=room_type,
        equipment=list(equipment or []),
        notes=notes or '',
        display_order=display_order,
    )


def update_room(tenant_id: str, room_id: str, **fields) -> ExamRoom:
    """Patch any subset of :data:`ROOM_PATCH_FIELDS`; at least one is required."""
    unknown = set(fields) - set(ROOM_PATCH_FIELDS)
    if unknown:
        raise ValidationError(f'Unknown room fields: {", ".join(sorted(unknown))}')
    changes = {k: v for k, v in fields.items() if v is not None}
    if not changes:
        raise ValidationError('No fields to update')
    if 'room_type' in changes and changes['room_type'] not in ROOM_TYPES:
        raise ValidationError(f'Unknown room type: {changes["room_type"]}')

    room = ExamRoom.objects.select_related('location').filter(tenant_id=tenant_id, id=room_id).first()
    if room is None:
        raise NotFound('Room not found')
    for field, value in changes.items():
        setattr(room, field, list(value) if field == 'equipment' else value)
    room.save(update_fields=[*changes, 'updated_at'])
    return room


def set_room_assignment(tenant_id: str, room_id: str, provider_id: int, day_of_week: int,
                        time_slot: str = 'all_day') -> RoomAssignment:
    """Upsert the provider's claim on a room for one weekday slot."""
    if not 0 <= int(day_of_week) <= 6:
        raise ValidationError('dayOfWeek must be between 0 (Sunday) and 6 (Saturday)')
    time_slot = time_slot or 'all_day'
    if time_slot not in TIME_SLOTS:
        raise ValidationError(f'Unknown time slot: {time_slot}')
    if not ExamRoom.objects.filter(tenant_id=tenant_id, id=room_id).exists():
        raise NotFound('Room not found')
    if not User.objects.filter(tenant_id=tenant_id, id=provider_id).exists():
        raise NotFound('Provider not found')

    assignment, _ = RoomAssignment.objects.update_or_create(
        tenant_id=tenant_id,
        room_id=room_id,
        day_of_week=int(day_of_week),
        time_slot=time_slot,
        defaults={'provider_id': provider_id, 'is_active': True},
    )
    return assignment


def remove_room_assignment(tenant_id: str, room_id: str, day_of_week: int,
                           time_slot: Optional[str] = None) -> int:
    """Deactivate matching assignments; every slot of the day when no slot is given."""
    qs = RoomAssignment.objects.filter(
        tenant_id=tenant_id, room_id=room_id, day_of_week=int(day_of_week), is_active=True
    )
    if time_slot:
        qs = qs.filter(time_slot=time_slot)
    return qs.update(is_active=False, updated_at=timezone.now())


def format_assignment(assignment: RoomAssignment) -> dict:
    return {
        'id': assignment.id,
        'roomId': assignment.room_id,
        'providerId': assignment.provider_id,
        'dayOfWeek': assignment.day_of_week,
        'timeSlot': assignment.time_slot,
        'isActive': assignment.is_active,
    }
