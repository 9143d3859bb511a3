"""
Doctor-side views over a patient's record.

Every endpoint is doctor-only; the per-patient ones additionally require
an accepted consultation with that patient, checked in the service
layer before any data is read or written.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import IsDoctorRole
from core.serializers.consult import MyPatientsQuerySerializer
from core.serializers.records import NoteCreateSerializer, PrescriptionCreateSerializer
from core.services.consult import my_patients
from core.services.files import format_file, list_patient_files
from core.services.records import (
    add_note,
    add_prescription,
    format_note,
    format_prescription,
    format_vital,
    list_notes,
    list_prescriptions,
    list_vitals,
)
from core.services.summary import generate_summary


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def my_patients_view(request):
    q = MyPatientsQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response({'ok': True, 'data': my_patients(request.user, q.validated_data.get('search'))})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def patient_vitals_view(request, patient_id: int):
    records = list_vitals(request.user, patient_id)
    return Response({'ok': True, 'data': [format_vital(r) for r in records]})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def patient_files_view(request, patient_id: int):
    files = list_patient_files(request.user, patient_id)
    return Response({'ok': True, 'data': [format_file(f) for f in files]})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def patient_notes_view(request, patient_id: int):
    if request.method == 'GET':
        notes = list_notes(request.user, patient_id)
        return Response({'ok': True, 'data': [format_note(n) for n in notes]})
    s = NoteCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    note = add_note(request.user, patient_id, s.validated_data['content'])
    return Response({'ok': True, 'message': 'Note added', 'note': format_note(note)},
                    status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def patient_prescriptions_view(request, patient_id: int):
    if request.method == 'GET':
        items = list_prescriptions(request.user, patient_id)
        return Response({'ok': True, 'data': [format_prescription(p) for p in items]})
    s = PrescriptionCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    rx = add_prescription(request.user, patient_id, **s.validated_data)
    return Response({'ok': True, 'message': 'Prescription issued successfully.',
                     'prescription': format_prescription(rx)},
                    status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def patient_summary_view(request, patient_id: int):
    return Response({'ok': True, 'summary': generate_summary(request.user, patient_id)})

patient_summary_view.cls.throttle_scope = 'summary'
