"""
Django admin registrations for the patient flow models.

Practice staff can inspect flows and maintain rooms from ``/admin/``.
Status history is read-only here; it is only ever written by the flow
engine.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import (
    Tenant,
    User,
    Location,
    Patient,
    Appointment,
    ExamRoom,
    PatientFlow,
    FlowStatusHistory,
    RoomAssignment,
)


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'created_at')
    search_fields = ('id', 'name')


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('username', 'role', 'tenant', 'is_staff', 'is_superuser')
    list_filter = ('role', 'tenant')
    fieldsets = BaseUserAdmin.fieldsets + (('Clinic', {'fields': ('role', 'tenant')}),)


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'tenant')
    list_filter = ('tenant',)


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'last_name', 'first_name', 'tenant')
    search_fields = ('first_name', 'last_name')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'provider', 'location', 'scheduled_start', 'status')
    list_filter = ('status', 'location')
    date_hierarchy = 'scheduled_start'


@admin.register(ExamRoom)
class ExamRoomAdmin(admin.ModelAdmin):
    list_display = ('room_number', 'room_name', 'location', 'room_type', 'is_active', 'display_order')
    list_filter = ('location', 'room_type', 'is_active')
    search_fields = ('room_name', 'room_number')

    def has_delete_permission(self, request, obj=None):
        # Deactivate instead; history rows keep pointing at the room.
        return False


class FlowStatusHistoryInline(admin.TabularInline):
    model = FlowStatusHistory
    extra = 0
    can_delete = False
    fields = ('sequence', 'from_status', 'to_status', 'changed_by', 'changed_at', 'room', 'duration_seconds')
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(PatientFlow)
class PatientFlowAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'status', 'room', 'assigned_provider', 'priority', 'status_changed_at')
    list_filter = ('status', 'priority', 'tenant')
    search_fields = ('patient__first_name', 'patient__last_name', 'appointment__id')
    readonly_fields = (
        'status', 'status_changed_at', 'checked_in_at', 'rooming_at', 'vitals_complete_at',
        'ready_for_provider_at', 'with_provider_at', 'checkout_at', 'completed_at', 'created_at',
    )
    inlines = [FlowStatusHistoryInline]


@admin.register(FlowStatusHistory)
class FlowStatusHistoryAdmin(admin.ModelAdmin):
    list_display = ('flow', 'sequence', 'from_status', 'to_status', 'changed_by', 'changed_at')
    list_filter = ('to_status',)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(RoomAssignment)
class RoomAssignmentAdmin(admin.ModelAdmin):
    list_display = ('room', 'provider', 'day_of_week', 'time_slot', 'is_active')
    list_filter = ('day_of_week', 'time_slot', 'is_active')
