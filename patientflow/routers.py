"""
URL mappings for the patient flow API.

Trailing slashes are deliberately omitted; the frontend calls the
paths exactly as listed here.
"""
from django.urls import path, include

from .views import health
from .views.flow import (
    active_flows,
    flow_history,
    patch_flow,
    provider_queue,
    room_board,
    update_flow_status,
    wait_times,
)
from .views.rooms import room_assignment_remove, room_assignment_set, room_detail, rooms


urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Patient flow
    path('api/patient-flow/board', room_board),
    path('api/patient-flow/wait-times', wait_times),
    path('api/patient-flow/active', active_flows),
    path('api/patient-flow/provider/<int:provider_id>/queue', provider_queue),
    path('api/patient-flow/<str:appointment_id>/status', update_flow_status),
    path('api/patient-flow/<str:appointment_id>/history', flow_history),
    path('api/patient-flow/<str:appointment_id>', patch_flow),
    # Rooms
    path('api/rooms', rooms),
    path('api/rooms/assignments', room_assignment_set),
    path('api/rooms/assignments/remove', room_assignment_remove),
    path('api/rooms/<str:room_id>', room_detail),
]
