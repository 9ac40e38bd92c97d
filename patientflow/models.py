"""
Database models for the patient flow backend.

The core of the app is :class:`PatientFlow` (one tracked visit per
appointment), its append-only :class:`FlowStatusHistory` and the
:class:`ExamRoom` registry.  Tenants, locations, patients and
appointments are kept to the fields the flow engine reads; their full
lifecycle belongs to other services.
"""
from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


def new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Flow vocabulary
# ---------------------------------------------------------------------------

class FlowStatus(models.TextChoices):
    CHECKED_IN = 'checked_in', 'Checked in'
    ROOMING = 'rooming', 'Rooming'
    VITALS_COMPLETE = 'vitals_complete', 'Vitals complete'
    READY_FOR_PROVIDER = 'ready_for_provider', 'Ready for provider'
    WITH_PROVIDER = 'with_provider', 'With provider'
    CHECKOUT = 'checkout', 'Checkout'
    COMPLETED = 'completed', 'Completed'


TERMINAL_STATUSES = frozenset({FlowStatus.COMPLETED})

# First-reached timestamp column for each status.
STATUS_TIMESTAMP_FIELDS = {
    FlowStatus.CHECKED_IN: 'checked_in_at',
    FlowStatus.ROOMING: 'rooming_at',
    FlowStatus.VITALS_COMPLETE: 'vitals_complete_at',
    FlowStatus.READY_FOR_PROVIDER: 'ready_for_provider_at',
    FlowStatus.WITH_PROVIDER: 'with_provider_at',
    FlowStatus.CHECKOUT: 'checkout_at',
    FlowStatus.COMPLETED: 'completed_at',
}


class Tenant(models.Model):
    """A practice using the system.  Every flow row is scoped to one."""
    id = models.CharField(max_length=64, primary_key=True)
    name = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class User(AbstractUser):
    """Staff account; acts on flows and may be a provider or MA."""
    ROLE_CHOICES = [
        ('admin', 'Administrator'),
        ('front_desk', 'Front desk'),
        ('ma', 'Medical assistant'),
        ('provider', 'Provider'),
        ('nurse', 'Nurse'),
    ]
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default='front_desk')
    tenant = models.ForeignKey(
        Tenant, null=True, blank=True, on_delete=models.SET_NULL, related_name='users', db_index=True
    )

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.username

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Location(models.Model):
    id = models.CharField(max_length=64, primary_key=True, default=new_id, editable=False)
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name='locations')
    name = models.CharField(max_length=255)

    def __str__(self) -> str:
        return self.name


class Patient(models.Model):
    id = models.CharField(max_length=64, primary_key=True, default=new_id, editable=False)
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name='patients')
    first_name = models.CharField(max_length=128)
    last_name = models.CharField(max_length=128)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return self.full_name


class Appointment(models.Model):
    """Scheduled visit owned by the scheduling service.

    Only ``status``, ``roomed_at`` and ``completed_at`` are written from
    here, as the coarse mirror of the visit's flow status.
    """
    STATUS_CHOICES = [
        ('scheduled', 'Scheduled'),
        ('checked_in', 'Checked in'),
        ('in_room', 'In room'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]
    id = models.CharField(max_length=64, primary_key=True, default=new_id, editable=False)
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name='appointments')
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='appointments')
    provider = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='provider_appointments'
    )
    location = models.ForeignKey(Location, on_delete=models.CASCADE, related_name='appointments')
    appointment_type = models.CharField(max_length=128, blank=True)
    scheduled_start = models.DateTimeField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='scheduled', db_index=True)
    roomed_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [models.Index(fields=['tenant', 'scheduled_start'], name='patientflow_tenant__c1a6f4_idx')]

    def __str__(self) -> str:
        return f"Appointment {self.id} ({self.status})"


class ExamRoom(models.Model):
    """An exam or procedure room at a location.

    Rooms are deactivated, never deleted, so that historical flows keep
    a valid room reference.
    """
    ROOM_TYPE_CHOICES = [
        ('exam', 'Exam'),
        ('procedure', 'Procedure'),
        ('consult', 'Consult'),
        ('triage', 'Triage'),
    ]
    id = models.CharField(max_length=64, primary_key=True, default=new_id, editable=False)
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name='rooms')
    location = models.ForeignKey(Location, on_delete=models.CASCADE, related_name='rooms')
    room_name = models.CharField(max_length=128)
    room_number = models.CharField(max_length=32)
    room_type = models.CharField(max_length=16, choices=ROOM_TYPE_CHOICES, default='exam')
    is_active = models.BooleanField(default=True, db_index=True)
    display_order = models.IntegerField(default=0)
    equipment = models.JSONField(default=list, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['display_order', 'room_number']
        indexes = [models.Index(fields=['tenant', 'location', 'is_active'], name='patientflow_tenant__5b0e2d_idx')]

    def __str__(self) -> str:
        return f"{self.room_name} ({self.room_number})"


class PatientFlow(models.Model):
    """Current operational state of one visit.

    Created lazily on the first status change of an appointment.  Each
    ``*_at`` column records the first time the visit reached that
    status and is never overwritten afterwards.
    """
    PRIORITY_CHOICES = [
        ('normal', 'Normal'),
        ('urgent', 'Urgent'),
        ('add-on', 'Add-on'),
    ]
    id = models.CharField(max_length=64, primary_key=True, default=new_id, editable=False)
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name='flows')
    appointment = models.ForeignKey(Appointment, on_delete=models.CASCADE, related_name='flows')
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='flows')
    room = models.ForeignKey(
        ExamRoom, null=True, blank=True, on_delete=models.PROTECT, related_name='flows'
    )
    status = models.CharField(max_length=20, choices=FlowStatus.choices, db_index=True)
    status_changed_at = models.DateTimeField()

    checked_in_at = models.DateTimeField(null=True, blank=True)
    rooming_at = models.DateTimeField(null=True, blank=True)
    vitals_complete_at = models.DateTimeField(null=True, blank=True)
    ready_for_provider_at = models.DateTimeField(null=True, blank=True)
    with_provider_at = models.DateTimeField(null=True, blank=True)
    checkout_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    assigned_provider = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='provider_flows'
    )
    assigned_ma = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='ma_flows'
    )
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='normal', db_index=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'appointment'], name='uniq_flow_per_appointment'),
        ]
        indexes = [
            models.Index(fields=['tenant', 'room', 'status'], name='patientflow_tenant__8d21c7_idx'),
            models.Index(fields=['tenant', 'assigned_provider', 'status'], name='patientflow_tenant__e47a90_idx'),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def __str__(self) -> str:
        return f"Flow {self.id} appt={self.appointment_id} [{self.status}]"


class FlowStatusHistory(models.Model):
    """One recorded status change of a flow.  Rows are immutable."""
    id = models.CharField(max_length=64, primary_key=True, default=new_id, editable=False)
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name='flow_history')
    flow = models.ForeignKey(PatientFlow, on_delete=models.CASCADE, related_name='history')
    sequence = models.PositiveIntegerField()
    from_status = models.CharField(max_length=20, choices=FlowStatus.choices, null=True, blank=True)
    to_status = models.CharField(max_length=20, choices=FlowStatus.choices)
    changed_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='flow_changes'
    )
    changed_at = models.DateTimeField()
    room = models.ForeignKey(
        ExamRoom, null=True, blank=True, on_delete=models.PROTECT, related_name='history'
    )
    notes = models.TextField(blank=True)
    # Seconds spent in ``from_status``; empty for the first entry.
    duration_seconds = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        ordering = ['flow', 'sequence']
        constraints = [
            models.UniqueConstraint(fields=['flow', 'sequence'], name='uniq_history_sequence'),
        ]
        indexes = [models.Index(fields=['flow', 'changed_at'], name='patientflow_flow_id_3f9b1e_idx')]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise TypeError("flow status history is append-only")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise TypeError("flow status history is append-only")

    def __str__(self) -> str:
        return f"{self.flow_id}#{self.sequence}: {self.from_status} → {self.to_status}"


class RoomAssignment(models.Model):
    """A provider's standing claim on a room for a weekday and slot.

    Only annotates the room board; it never blocks occupancy.
    ``day_of_week`` counts from Sunday (0) to Saturday (6).
    """
    TIME_SLOT_CHOICES = [
        ('all_day', 'All day'),
        ('am', 'Morning'),
        ('pm', 'Afternoon'),
    ]
    id = models.CharField(max_length=64, primary_key=True, default=new_id, editable=False)
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name='room_assignments')
    room = models.ForeignKey(ExamRoom, on_delete=models.CASCADE, related_name='assignments')
    provider = models.ForeignKey(User, on_delete=models.CASCADE, related_name='room_assignments')
    day_of_week = models.PositiveSmallIntegerField()
    time_slot = models.CharField(max_length=16, choices=TIME_SLOT_CHOICES, default='all_day')
    effective_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['tenant', 'room', 'day_of_week', 'time_slot'], name='uniq_room_assignment_slot'
            ),
        ]

    def __str__(self) -> str:
        return f"Assign(room={self.room_id}, prov={self.provider_id}, dow={self.day_of_week}, {self.time_slot})"
