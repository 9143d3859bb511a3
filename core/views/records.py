"""
Patient-facing record endpoints: vitals, and read access to the notes
and prescriptions doctors have written about the caller.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import IsPatientRole
from core.serializers.records import VitalCreateSerializer
from core.services.records import (
    add_vital,
    format_note,
    format_prescription,
    format_vital,
    list_notes,
    list_prescriptions,
    list_vitals,
)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPatientRole])
def add_vital_view(request):
    s = VitalCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    record = add_vital(request.user, bp=vd['bp'], sugar=vd['sugar'], heart_rate=vd['heartRate'])
    return Response({'ok': True, 'message': 'Vitals added', 'record': format_vital(record)},
                    status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def my_vitals_view(request):
    records = list_vitals(request.user, request.user.id)
    return Response({'ok': True, 'data': [format_vital(r) for r in records]})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def patient_notes_view(request, patient_id: int):
    notes = list_notes(request.user, patient_id)
    return Response({'ok': True, 'data': [format_note(n) for n in notes]})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def patient_prescriptions_view(request, patient_id: int):
    items = list_prescriptions(request.user, patient_id)
    return Response({'ok': True, 'data': [format_prescription(p) for p in items]})
