from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import IsDoctorRole, IsPatientRole
from core.serializers.consult import ConsultRespondSerializer, DoctorSearchQuerySerializer
from core.services.consult import (
    ACTION_ACCEPT,
    list_pending,
    my_doctors,
    request_consultation,
    respond_consultation,
    search_doctors,
)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def search_doctors_view(request):
    q = DoctorSearchQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    data = search_doctors(request.user, q.validated_data.get('query'))
    return Response({'ok': True, 'data': data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPatientRole])
def request_consultation_view(request, doctor_id: int):
    request_consultation(request.user, doctor_id)
    return Response({'ok': True, 'message': 'Consultation request sent to doctor.'})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def pending_view(request):
    return Response({'ok': True, 'data': list_pending(request.user)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def respond_view(request, patient_id: int):
    s = ConsultRespondSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    action = respond_consultation(request.user, patient_id, s.validated_data.get('action'))
    message = 'Consultation accepted.' if action == ACTION_ACCEPT else 'Consultation rejected.'
    return Response({'ok': True, 'action': action, 'message': message})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def my_doctors_view(request):
    return Response({'ok': True, 'data': my_doctors(request.user)})
