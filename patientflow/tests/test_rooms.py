import pytest

from patientflow.exceptions import NotFound, ValidationError
from patientflow.models import RoomAssignment
from patientflow.services.rooms import (
    create_room,
    format_room,
    list_rooms,
    remove_room_assignment,
    set_room_assignment,
    update_room,
)

pytestmark = pytest.mark.django_db


def test_create_and_list_rooms_in_display_order(location):
    b = create_room('t1', location_id=location.id, room_name='Exam B', room_number='102', display_order=2)
    a = create_room('t1', location_id=location.id, room_name='Exam A', room_number='101', display_order=1,
                    equipment=['otoscope'])

    rooms = list_rooms('t1', location.id)

    assert [r.id for r in rooms] == [a.id, b.id]
    data = format_room(rooms[0])
    assert data['roomType'] == 'exam'
    assert data['isActive'] is True
    assert data['equipment'] == ['otoscope']
    assert data['locationName'] == 'Downtown'


def test_create_room_validation(location, other_tenant):
    with pytest.raises(ValidationError):
        create_room('t1', location_id=location.id, room_name='X', room_number='1', room_type='closet')
    with pytest.raises(NotFound):
        create_room(other_tenant.id, location_id=location.id, room_name='X', room_number='1')


def test_update_room_patches_given_fields(make_room):
    room = make_room('101', notes='old')

    updated = update_room('t1', room.id, room_name='Renamed', is_active=False)

    assert updated.room_name == 'Renamed'
    assert updated.is_active is False
    assert updated.notes == 'old'
    assert list_rooms('t1', active_only=True) == []


def test_update_room_errors(make_room):
    room = make_room('101')
    with pytest.raises(ValidationError):
        update_room('t1', room.id)
    with pytest.raises(ValidationError):
        update_room('t1', room.id, colour='blue')
    with pytest.raises(ValidationError):
        update_room('t1', room.id, room_type='closet')
    with pytest.raises(NotFound):
        update_room('t1', 'missing', room_name='X')


def test_assignment_upsert_replaces_provider(make_room, provider, ma):
    room = make_room('101')
    set_room_assignment('t1', room.id, provider.id, 2)

    again = set_room_assignment('t1', room.id, ma.id, 2)

    assert RoomAssignment.objects.count() == 1
    assert again.provider_id == ma.id
    assert again.time_slot == 'all_day'


def test_assignment_validation(make_room, provider):
    room = make_room('101')
    with pytest.raises(ValidationError):
        set_room_assignment('t1', room.id, provider.id, 7)
    with pytest.raises(ValidationError):
        set_room_assignment('t1', room.id, provider.id, 1, 'evening')
    with pytest.raises(NotFound):
        set_room_assignment('t1', 'missing', provider.id, 1)
    with pytest.raises(NotFound):
        set_room_assignment('t1', room.id, 424242, 1)


def test_remove_assignment_deactivates(make_room, provider):
    room = make_room('101')
    set_room_assignment('t1', room.id, provider.id, 3, 'am')
    set_room_assignment('t1', room.id, provider.id, 3, 'pm')
    set_room_assignment('t1', room.id, provider.id, 4)

    assert remove_room_assignment('t1', room.id, 3, 'am') == 1
    assert remove_room_assignment('t1', room.id, 3) == 1
    assert remove_room_assignment('t1', room.id, 3) == 0
    assert list(RoomAssignment.objects.filter(is_active=True).values_list('day_of_week', flat=True)) == [4]
    # Reassigning reactivates the slot.
    assert set_room_assignment('t1', room.id, provider.id, 3, 'am').is_active is True
