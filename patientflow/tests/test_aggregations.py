from datetime import timedelta

import pytest

from patientflow.models import FlowStatus, Location, User
from patientflow.services.board import (
    get_active_flows,
    get_flow_history,
    get_provider_queue,
    get_room_board,
    get_wait_times,
)
from patientflow.services.flow import FlowEngine
from patientflow.services.rooms import set_room_assignment

pytestmark = pytest.mark.django_db

MONDAY = 1


def test_room_board_lists_every_active_room(engine, clock, make_appointment, make_room, location):
    r1 = make_room('101', display_order=1)
    r2 = make_room('102', display_order=2)
    make_room('999', is_active=False)
    appt = make_appointment('Ada', 'Lovelace')
    engine.set_status('t1', appt.id, FlowStatus.ROOMING, room_id=r1.id)
    clock.advance(minutes=12)

    board = get_room_board('t1', location.id, now=clock.now)

    assert [entry['room']['id'] for entry in board] == [r1.id, r2.id]
    occupied, empty = board
    patient = occupied['currentPatient']
    assert patient['patientName'] == 'Ada Lovelace'
    assert patient['status'] == FlowStatus.ROOMING
    assert patient['waitTimeMinutes'] == 12
    assert patient['providerName'] == 'Jane Smith'
    assert patient['appointmentType'] == 'Follow-up'
    assert 'currentPatient' not in empty
    assert 'assignedProvider' not in empty


def test_room_board_ignores_completed_and_earlier_days(engine, clock, make_appointment, make_room, location):
    room = make_room('101')
    yesterday = make_appointment('Old')
    engine.set_status('t1', yesterday.id, FlowStatus.ROOMING, room_id=room.id)
    clock.advance(days=1)
    done = make_appointment('Done')
    engine.set_status('t1', done.id, FlowStatus.ROOMING, room_id=room.id)
    engine.set_status('t1', done.id, FlowStatus.COMPLETED)

    board = get_room_board('t1', location.id, now=clock.now)

    assert len(board) == 1
    assert 'currentPatient' not in board[0]


def test_room_board_shows_assigned_provider(clock, make_room, provider, tenant, location):
    r1 = make_room('101')
    r2 = make_room('102')
    covering = User.objects.create_user(
        username='drjones', password='x', role='provider', tenant=tenant, first_name='Lee', last_name='Jones'
    )
    set_room_assignment('t1', r1.id, provider.id, MONDAY)
    set_room_assignment('t1', r1.id, covering.id, MONDAY, 'am')
    set_room_assignment('t1', r2.id, provider.id, MONDAY, 'pm')

    board = {entry['room']['id']: entry for entry in get_room_board('t1', location.id, now=clock.now)}

    assert board[r1.id]['assignedProvider'] == {'id': covering.id, 'name': 'Lee Jones'}
    assert 'assignedProvider' not in board[r2.id]


def test_provider_queue_orders_by_priority_then_readiness(engine, clock, make_appointment, provider, ma):
    normal = make_appointment('Norm')
    urgent = make_appointment('Urgent')
    addon = make_appointment('Addon')
    early_normal = make_appointment('Early')
    for appt in (early_normal, normal, urgent, addon):
        engine.set_status('t1', appt.id, FlowStatus.READY_FOR_PROVIDER)
        clock.advance(minutes=1)
    engine.update_flow('t1', urgent.id, priority='urgent')
    engine.update_flow('t1', addon.id, priority='add-on')
    # Not waiting for the provider yet.
    engine.set_status('t1', make_appointment('Lobby').id, FlowStatus.CHECKED_IN)
    # Someone else's patient.
    engine.set_status('t1', make_appointment('Other', provider=ma).id, FlowStatus.READY_FOR_PROVIDER)

    queue = get_provider_queue('t1', provider.id, now=clock.now)

    assert [item['appointmentId'] for item in queue] == [urgent.id, addon.id, early_normal.id, normal.id]
    assert [item['priority'] for item in queue] == ['urgent', 'add-on', 'normal', 'normal']
    assert queue[0]['roomNumber'] is None
    assert queue[-1]['waitTimeMinutes'] == 3


def test_provider_queue_mixed_statuses_follow_priority(engine, clock, make_appointment, provider):
    normal = make_appointment('Normal')
    urgent = make_appointment('Urgent')
    addon = make_appointment('Addon')
    engine.set_status('t1', normal.id, FlowStatus.READY_FOR_PROVIDER)
    clock.advance(minutes=1)
    engine.set_status('t1', urgent.id, FlowStatus.WITH_PROVIDER)
    engine.update_flow('t1', urgent.id, priority='urgent')
    clock.advance(minutes=1)
    engine.set_status('t1', addon.id, FlowStatus.VITALS_COMPLETE)
    engine.update_flow('t1', addon.id, priority='add-on')

    queue = get_provider_queue('t1', provider.id, now=clock.now)

    assert [item['priority'] for item in queue] == ['urgent', 'add-on', 'normal']
    assert [item['status'] for item in queue] == [
        FlowStatus.WITH_PROVIDER, FlowStatus.VITALS_COMPLETE, FlowStatus.READY_FOR_PROVIDER,
    ]


def test_provider_queue_puts_not_yet_ready_last_then_by_schedule(engine, clock, make_appointment, provider):
    late = make_appointment('Late', scheduled_start=clock.now + timedelta(hours=2))
    early = make_appointment('Early', scheduled_start=clock.now - timedelta(minutes=30))
    ready = make_appointment('Ready', scheduled_start=clock.now + timedelta(hours=3))
    engine.set_status('t1', late.id, FlowStatus.VITALS_COMPLETE)
    clock.advance(minutes=1)
    engine.set_status('t1', early.id, FlowStatus.VITALS_COMPLETE)
    clock.advance(minutes=1)
    engine.set_status('t1', ready.id, FlowStatus.READY_FOR_PROVIDER)

    queue = get_provider_queue('t1', provider.id, now=clock.now)

    assert [item['patientName'].split()[0] for item in queue] == ['Ready', 'Early', 'Late']


def test_room_board_longest_occupant_wins(publisher, clock, make_appointment, make_room, location):
    engine = FlowEngine(publisher, clock=clock, enforce_room_exclusivity=False)
    room = make_room('101')
    engine.set_status('t1', make_appointment('First').id, FlowStatus.ROOMING, room_id=room.id)
    clock.advance(minutes=1)
    engine.set_status('t1', make_appointment('Second').id, FlowStatus.ROOMING, room_id=room.id)

    board = get_room_board('t1', location.id, now=clock.now)

    assert len(board) == 1
    assert board[0]['currentPatient']['patientName'].startswith('First')
    assert board[0]['currentPatient']['waitTimeMinutes'] == 1


def test_provider_queue_includes_visits_with_the_provider(engine, clock, make_appointment, make_room, provider):
    room = make_room('101', room_name='Exam One')
    appt = make_appointment()
    engine.set_status('t1', appt.id, FlowStatus.WITH_PROVIDER, room_id=room.id)

    queue = get_provider_queue('t1', provider.id, now=clock.now)

    assert len(queue) == 1
    assert queue[0]['status'] == FlowStatus.WITH_PROVIDER
    assert queue[0]['roomNumber'] == '101'
    assert queue[0]['roomName'] == 'Exam One'


def test_wait_times_average_each_stage(engine, clock, make_appointment, location, tenant):
    Location.objects.create(id='loc-2', tenant=tenant, name='Uptown')
    start = clock.now
    a = make_appointment('A')
    b = make_appointment('B')
    engine.set_status('t1', a.id, FlowStatus.CHECKED_IN)
    engine.set_status('t1', b.id, FlowStatus.CHECKED_IN)
    clock.now = start + timedelta(minutes=10)
    engine.set_status('t1', a.id, FlowStatus.ROOMING)
    clock.now = start + timedelta(minutes=20)
    engine.set_status('t1', b.id, FlowStatus.ROOMING)
    clock.now = start + timedelta(minutes=25)
    engine.set_status('t1', b.id, FlowStatus.WITH_PROVIDER)

    stats = get_wait_times('t1', now=clock.now)

    assert [s['locationName'] for s in stats] == ['Downtown', 'Uptown']
    downtown, uptown = stats
    assert downtown['avgCheckinToRooming'] == 15.0
    assert downtown['avgRoomingToVitals'] is None
    assert downtown['avgTotalVisitTime'] is None
    assert downtown['currentWaitingCount'] == 1
    assert downtown['currentWithProviderCount'] == 1
    assert uptown['avgCheckinToRooming'] is None
    assert uptown['currentWaitingCount'] == 0


def test_wait_times_rounds_to_one_decimal(engine, clock, make_appointment, location):
    appt = make_appointment()
    engine.set_status('t1', appt.id, FlowStatus.CHECKED_IN)
    clock.advance(seconds=100)
    engine.set_status('t1', appt.id, FlowStatus.ROOMING)

    stats = get_wait_times('t1', location.id, now=clock.now)

    assert len(stats) == 1
    assert stats[0]['avgCheckinToRooming'] == 1.7


def test_wait_times_total_visit(engine, clock, make_appointment, location):
    appt = make_appointment()
    for status in FlowStatus.values:
        engine.set_status('t1', appt.id, status)
        clock.advance(minutes=2)

    stats = get_wait_times('t1', location.id, now=clock.now)[0]

    assert stats['avgTotalVisitTime'] == 12.0
    assert stats['avgVitalsToProvider'] == 2.0
    assert stats['avgProviderToCheckout'] == 4.0
    assert stats['currentWaitingCount'] == 0


def test_flow_history_names_the_actor(engine, clock, make_appointment, ma):
    appt = make_appointment()
    engine.set_status('t1', appt.id, FlowStatus.CHECKED_IN)
    clock.advance(minutes=4)
    engine.set_status('t1', appt.id, FlowStatus.ROOMING, actor=ma, notes='room 3')

    history = get_flow_history('t1', appt.id)

    assert [h['sequence'] for h in history] == [1, 2]
    assert 'changedByName' not in history[0]
    assert history[1]['changedByName'] == 'Sam Lee'
    assert history[1]['durationSeconds'] == 240
    assert history[1]['notes'] == 'room 3'
    assert get_flow_history('t1', 'missing') == []
    assert get_flow_history('t2', appt.id) == []


def test_active_flows_exclude_completed(engine, clock, make_appointment, location):
    waiting = make_appointment('Wait')
    done = make_appointment('Done')
    engine.set_status('t1', waiting.id, FlowStatus.CHECKOUT)
    engine.set_status('t1', done.id, FlowStatus.COMPLETED)

    flows = get_active_flows('t1', location.id, now=clock.now)

    assert [f.appointment_id for f in flows] == [waiting.id]
    assert get_active_flows('t1', 'elsewhere', now=clock.now) == []
