from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import IsPatientRole
from core.services.files import format_file, list_own_files, upload_file


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def upload_view(request):
    f = upload_file(request.user, request.FILES.get('file'))
    return Response({'ok': True, 'message': 'File uploaded successfully', 'file': format_file(f)},
                    status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def my_files_view(request):
    return Response({'ok': True, 'data': [format_file(f) for f in list_own_files(request.user)]})
