"""
Management command to populate the database with a demo clinic.

Creates one tenant with a location, exam rooms, staff, patients and
today's appointments, then checks some of them in through the flow
engine so the room board and provider queue have something to show.
Safe to run repeatedly.
"""
from datetime import timedelta

from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.utils import timezone

from patientflow.models import Appointment, ExamRoom, FlowStatus, Location, Patient, PatientFlow, Tenant, User
from patientflow.realtime.publisher import NullPublisher
from patientflow.services.flow import get_flow_engine
from patientflow.services.rooms import set_room_assignment


class Command(BaseCommand):
    help = 'Populate database with a demo clinic and some in-progress visits'

    def add_arguments(self, parser):
        parser.add_argument('--tenant', default='demo', help='Tenant id to create or reuse')
        parser.add_argument('--password', default='123456', help='Password for the demo staff accounts')
        parser.add_argument('--no-flows', action='store_true', help='Skip checking patients in')

    def handle(self, *args, **options):
        tenant, _ = Tenant.objects.get_or_create(id=options['tenant'], defaults={'name': 'Demo Family Practice'})
        self.stdout.write(f'Tenant: {tenant.id}')

        location = self.create_location(tenant)
        rooms = self.create_rooms(tenant, location)
        staff = self.create_staff(tenant, options['password'])
        appointments = self.create_appointments(tenant, location, staff['provider1'])

        today = timezone.localdate()
        set_room_assignment(tenant.id, rooms[0].id, staff['provider1'].id, (today.weekday() + 1) % 7)

        if not options['no_flows']:
            self.start_visits(tenant, appointments, rooms, staff)

        self.stdout.write(self.style.SUCCESS('Demo clinic ready.'))

    def create_location(self, tenant):
        location = Location.objects.filter(tenant=tenant, name='Main Street Clinic').first()
        if location is None:
            location = Location.objects.create(tenant=tenant, name='Main Street Clinic')
        return location

    def create_rooms(self, tenant, location):
        rooms_data = [
            {'room_number': '101', 'room_name': 'Exam 1', 'room_type': 'exam', 'display_order': 1},
            {'room_number': '102', 'room_name': 'Exam 2', 'room_type': 'exam', 'display_order': 2},
            {'room_number': '103', 'room_name': 'Procedure', 'room_type': 'procedure', 'display_order': 3,
             'equipment': ['suture kit', 'cautery']},
            {'room_number': '104', 'room_name': 'Triage', 'room_type': 'triage', 'display_order': 4},
        ]
        rooms = []
        for data in rooms_data:
            room, created = ExamRoom.objects.get_or_create(
                tenant=tenant, location=location, room_number=data['room_number'], defaults=data
            )
            rooms.append(room)
            if created:
                self.stdout.write(f'Created room: {room.room_number} {room.room_name}')
        return rooms

    def create_staff(self, tenant, password):
        staff_data = [
            ('frontdesk1', 'front_desk', 'Fran', 'Desk'),
            ('ma1', 'ma', 'Morgan', 'Assist'),
            ('provider1', 'provider', 'Pat', 'Doctor'),
            ('admin1', 'admin', 'Alex', 'Admin'),
        ]
        staff = {}
        for username, role, first, last in staff_data:
            user, created = User.objects.get_or_create(
                username=username,
                defaults={
                    'password': make_password(password),
                    'role': role,
                    'tenant': tenant,
                    'first_name': first,
                    'last_name': last,
                },
            )
            staff[username] = user
            if created:
                self.stdout.write(f'Created user: {username} ({role})')
        return staff

    def create_appointments(self, tenant, location, provider):
        names = [('Ada', 'Lovelace'), ('Alan', 'Turing'), ('Grace', 'Hopper'), ('Edsger', 'Dijkstra')]
        start = timezone.now().replace(minute=0, second=0, microsecond=0)
        appointments = []
        for i, (first, last) in enumerate(names):
            patient, _ = Patient.objects.get_or_create(tenant=tenant, first_name=first, last_name=last)
            appointment, _ = Appointment.objects.get_or_create(
                tenant=tenant,
                patient=patient,
                scheduled_start__date=start.date(),
                defaults={
                    'provider': provider,
                    'location': location,
                    'appointment_type': 'Follow-up' if i % 2 else 'New patient',
                    'scheduled_start': start + timedelta(minutes=20 * i),
                },
            )
            appointments.append(appointment)
        return appointments

    def start_visits(self, tenant, appointments, rooms, staff):
        engine = get_flow_engine(publisher=NullPublisher())
        plan = [
            [FlowStatus.CHECKED_IN, FlowStatus.ROOMING, FlowStatus.VITALS_COMPLETE, FlowStatus.READY_FOR_PROVIDER],
            [FlowStatus.CHECKED_IN, FlowStatus.ROOMING],
            [FlowStatus.CHECKED_IN],
        ]
        for appointment, statuses, room in zip(appointments, plan, rooms):
            if PatientFlow.objects.filter(tenant=tenant, appointment=appointment).exists():
                continue
            for status in statuses:
                room_id = room.id if status == FlowStatus.ROOMING else None
                engine.set_status(tenant.id, appointment.id, status, room_id=room_id, actor=staff['ma1'])
            self.stdout.write(f'Visit {appointment.patient.full_name}: {statuses[-1]}')
