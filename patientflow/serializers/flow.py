import bleach
from rest_framework import serializers

from patientflow.models import ExamRoom, FlowStatus, PatientFlow, RoomAssignment


def _clean_text(v):
    return bleach.clean((v or '').strip(), strip=True)


class FlowStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=FlowStatus.values)
    roomId = serializers.CharField(max_length=64, required=False)
    notes = serializers.CharField(max_length=2000, required=False, allow_blank=True)

    def validate_notes(self, v):
        return _clean_text(v)


class FlowPatchSerializer(serializers.Serializer):
    priority = serializers.ChoiceField(choices=[p for p, _ in PatientFlow.PRIORITY_CHOICES], required=False)
    assignedMaId = serializers.IntegerField(min_value=1, required=False)
    assignedProviderId = serializers.IntegerField(min_value=1, required=False)
    notes = serializers.CharField(max_length=2000, required=False, allow_blank=True)

    def validate_notes(self, v):
        return _clean_text(v)


class LocationQuerySerializer(serializers.Serializer):
    locationId = serializers.CharField(max_length=64, required=False)


class RoomCreateSerializer(serializers.Serializer):
    roomName = serializers.CharField(max_length=128)
    roomNumber = serializers.CharField(max_length=32)
    locationId = serializers.CharField(max_length=64)
    roomType = serializers.ChoiceField(choices=[t for t, _ in ExamRoom.ROOM_TYPE_CHOICES], required=False)
    equipment = serializers.ListField(child=serializers.CharField(max_length=64), required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    displayOrder = serializers.IntegerField(required=False)


class RoomUpdateSerializer(serializers.Serializer):
    roomName = serializers.CharField(max_length=128, required=False)
    roomNumber = serializers.CharField(max_length=32, required=False)
    roomType = serializers.ChoiceField(choices=[t for t, _ in ExamRoom.ROOM_TYPE_CHOICES], required=False)
    isActive = serializers.BooleanField(required=False)
    equipment = serializers.ListField(child=serializers.CharField(max_length=64), required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    displayOrder = serializers.IntegerField(required=False)


class RoomAssignmentSerializer(serializers.Serializer):
    roomId = serializers.CharField(max_length=64)
    providerId = serializers.IntegerField(min_value=1)
    dayOfWeek = serializers.IntegerField(min_value=0, max_value=6)
    timeSlot = serializers.ChoiceField(choices=[s for s, _ in RoomAssignment.TIME_SLOT_CHOICES], required=False)


class RoomAssignmentRemoveSerializer(serializers.Serializer):
    roomId = serializers.CharField(max_length=64)
    dayOfWeek = serializers.IntegerField(min_value=0, max_value=6)
    timeSlot = serializers.ChoiceField(choices=[s for s, _ in RoomAssignment.TIME_SLOT_CHOICES], required=False)
