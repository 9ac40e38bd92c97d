"""
Exam room registry and provider room assignment endpoints.

Any clinical role may list rooms; creating, editing and assigning rooms
is limited to practice administrators.  There is no delete endpoint:
rooms are retired with ``isActive: false``.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from ..permissions import IsClinicalStaff, IsPracticeAdmin
from ..serializers.flow import (
    LocationQuerySerializer,
    RoomAssignmentRemoveSerializer,
    RoomAssignmentSerializer,
    RoomCreateSerializer,
    RoomUpdateSerializer,
)
from ..services.rooms import (
    create_room,
    format_assignment,
    format_room,
    list_rooms,
    remove_room_assignment,
    set_room_assignment,
    update_room,
)

# request key -> service keyword
ROOM_FIELD_MAP = {
    'roomName': 'room_name',
    'roomNumber': 'room_number',
    'roomType': 'room_type',
    'isActive': 'is_active',
    'equipment': 'equipment',
    'notes': 'notes',
    'displayOrder': 'display_order',
}


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def rooms(request):
    if request.method == 'GET':
        q = LocationQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        data = [format_room(r) for r in list_rooms(request.user.tenant_id, q.validated_data.get('locationId'))]
        return Response({'ok': True, 'data': data})

    if not IsPracticeAdmin().has_permission(request, None):
        return Response(
            {'ok': False, 'error': {'code': 'permission_denied', 'message': 'forbidden'}},
            status=status.HTTP_403_FORBIDDEN,
        )
    s = RoomCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = s.validated_data
    room = create_room(
        request.user.tenant_id,
        location_id=data['locationId'],
        room_name=data['roomName'],
        room_number=data['roomNumber'],
        room_type=data.get('roomType', 'exam'),
        equipment=data.get('equipment'),
        notes=data.get('notes', ''),
        display_order=data.get('displayOrder', 0),
    )
    return Response({'ok': True, 'data': format_room(room)}, status=status.HTTP_201_CREATED)


@api_view(['PATCH', 'PUT'])
@permission_classes([IsAuthenticated, IsClinicalStaff, IsPracticeAdmin])
def room_detail(request, room_id: str):
    s = RoomUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    fields = {ROOM_FIELD_MAP[k]: v for k, v in s.validated_data.items()}
    room = update_room(request.user.tenant_id, room_id, **fields)
    return Response({'ok': True, 'data': format_room(room)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsClinicalStaff, IsPracticeAdmin])
def room_assignment_set(request):
    s = RoomAssignmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = s.validated_data
    assignment = set_room_assignment(
        request.user.tenant_id,
        data['roomId'],
        data['providerId'],
        data['dayOfWeek'],
        data.get('timeSlot', 'all_day'),
    )
    return Response({'ok': True, 'data': format_assignment(assignment)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsClinicalStaff, IsPracticeAdmin])
def room_assignment_remove(request):
    s = RoomAssignmentRemoveSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = s.validated_data
    removed = remove_room_assignment(
        request.user.tenant_id, data['roomId'], data['dayOfWeek'], data.get('timeSlot')
    )
    return Response({'ok': True, 'removed': removed})
