"""
Appointment collaborator used by the flow engine.

Scheduling owns appointments; the flow engine only needs to look one up
when a visit is first tracked and to mirror a coarse status back onto
it.  Both calls run inside the engine's transaction.
"""
from dataclasses import dataclass
from typing import Optional

from django.db.models.functions import Coalesce

from patientflow.exceptions import NotFound
from patientflow.models import Appointment, FlowStatus

# Fine-grained flow status -> coarse appointment status.
APPOINTMENT_STATUS_FOR_FLOW = {
    FlowStatus.CHECKED_IN: 'checked_in',
    FlowStatus.ROOMING: 'in_room',
    FlowStatus.VITALS_COMPLETE: 'in_room',
    FlowStatus.READY_FOR_PROVIDER: 'in_room',
    FlowStatus.WITH_PROVIDER: 'in_room',
    FlowStatus.CHECKOUT: 'completed',
    FlowStatus.COMPLETED: 'completed',
}


@dataclass
class AppointmentRef:
    id: str
    patient_id: str
    provider_id: Optional[int]


class AppointmentDirectory:
    """ORM-backed appointment lookup and status mirror."""

    def lookup(self, tenant_id: str, appointment_id, *, lock: bool = False) -> AppointmentRef:
        qs = Appointment.objects.filter(tenant_id=tenant_id, id=appointment_id)
        if lock:
            qs = qs.select_for_update()
        row = qs.values('id', 'patient_id', 'provider_id').first()
        if not row:
            raise NotFound('Appointment not found')
        return AppointmentRef(id=str(row['id']), patient_id=str(row['patient_id']), provider_id=row['provider_id'])

    def mirror_status(self, tenant_id: str, appointment_id, flow_status: str, *, now) -> int:
        """Write the coarse status for ``flow_status``; repeating it is harmless."""
        coarse = APPOINTMENT_STATUS_FOR_FLOW[flow_status]
        updates = {'status': coarse}
        if coarse == 'in_room':
            updates['roomed_at'] = Coalesce('roomed_at', now)
        if flow_status == FlowStatus.COMPLETED:
            updates['completed_at'] = now
        return Appointment.objects.filter(tenant_id=tenant_id, id=appointment_id).update(**updates)
