"""
Patient flow endpoints.

Front desk, MAs, nurses and providers move visits through the flow and
read the live views (room board, provider queue, wait times).  Every
call is scoped to the tenant of the authenticated user.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exceptions import ValidationError
from ..permissions import IsClinicalStaff
from ..serializers.flow import FlowPatchSerializer, FlowStatusUpdateSerializer, LocationQuerySerializer
from ..services.board import (
    format_flow,
    get_active_flows,
    get_flow_history,
    get_provider_queue,
    get_room_board,
    get_wait_times,
)
from ..services.flow import get_flow_engine


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def room_board(request):
    """Every active room at a location with its current occupant."""
    location_id = request.query_params.get('locationId')
    if not location_id:
        raise ValidationError('locationId is required')
    board = get_room_board(request.user.tenant_id, location_id)
    return Response({'ok': True, 'data': board})


@api_view(['PUT', 'POST'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def update_flow_status(request, appointment_id: str):
    """Move the visit to a new status; creates the flow on first use."""
    s = FlowStatusUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    flow = get_flow_engine().set_status(
        request.user.tenant_id,
        appointment_id,
        s.validated_data['status'],
        room_id=s.validated_data.get('roomId'),
        actor=request.user,
        notes=s.validated_data.get('notes'),
    )
    return Response({'ok': True, 'data': format_flow(flow)})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def patch_flow(request, appointment_id: str):
    """Change priority, assigned staff or notes without a status change."""
    s = FlowPatchSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = s.validated_data
    flow = get_flow_engine().update_flow(
        request.user.tenant_id,
        appointment_id,
        priority=data.get('priority'),
        assigned_ma_id=data.get('assignedMaId'),
        assigned_provider_id=data.get('assignedProviderId'),
        notes=data.get('notes'),
    )
    return Response({'ok': True, 'data': format_flow(flow)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def flow_history(request, appointment_id: str):
    return Response({'ok': True, 'data': get_flow_history(request.user.tenant_id, appointment_id)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def provider_queue(request, provider_id: int):
    return Response({'ok': True, 'data': get_provider_queue(request.user.tenant_id, provider_id)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def wait_times(request):
    q = LocationQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    data = get_wait_times(request.user.tenant_id, q.validated_data.get('locationId'))
    return Response({'ok': True, 'data': data})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def active_flows(request):
    q = LocationQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    flows = get_active_flows(request.user.tenant_id, q.validated_data.get('locationId'))
    return Response({'ok': True, 'data': [format_flow(f) for f in flows]})
