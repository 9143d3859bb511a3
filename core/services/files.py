"""
Patient file uploads.

Bytes go to Django's default storage under ``<uuid4>-<original name>``;
only metadata is kept in :class:`core.models.MedicalFile`.
"""
from __future__ import annotations

import logging
import os
import uuid

from django.conf import settings
from django.core.files.storage import default_storage

from core.errors import Forbidden, InvalidArgument, PayloadTooLarge, ServiceUnavailable
from core.models import MedicalFile, User
from core.services.consult import ensure_doctor_consulting
from core.services.records import NEWEST_FIRST

logger = logging.getLogger(__name__)


def max_upload_bytes() -> int:
    return settings.UPLOAD_MAX_MB * 1024 * 1024


def format_file(f: MedicalFile) -> dict:
    return {
        'id': f.id,
        'ownerId': f.owner_id,
        'fileName': f.file_name,
        'storageKey': f.storage_key,
        'fileUrl': f.file_url,
        'contentType': f.content_type,
        'size': f.size,
        'createdAt': f.created_at.isoformat(),
    }


def upload_file(owner, upload) -> MedicalFile:
    if upload is None:
        raise InvalidArgument('No file uploaded')
    size = upload.size or 0
    if size > max_upload_bytes():
        raise PayloadTooLarge(f'File too large. Maximum size is {settings.UPLOAD_MAX_MB}MB.')

    file_name = os.path.basename(upload.name or 'upload')[:255]
    key = f"{uuid.uuid4()}-{file_name}"
    try:
        stored_key = default_storage.save(key, upload)
        url = default_storage.url(stored_key)
    except (OSError, ValueError) as e:
        logger.error('file storage failed owner=%s name=%s: %s', owner.id, file_name, e)
        raise ServiceUnavailable('Failed to upload file') from e

    f = MedicalFile.objects.create(
        owner_id=owner.id,
        file_name=file_name,
        storage_key=stored_key,
        file_url=url,
        content_type=getattr(upload, 'content_type', '') or '',
        size=size,
    )
    logger.info('file %s uploaded owner=%s size=%s', f.id, owner.id, size)
    return f


def list_own_files(user) -> list[MedicalFile]:
    if getattr(user, 'role', '') != User.ROLE_PATIENT:
        raise Forbidden('Only patients can list their files.')
    return list(MedicalFile.objects.filter(owner_id=user.id).order_by(*NEWEST_FIRST))


def list_patient_files(doctor, patient_id) -> list[MedicalFile]:
    ensure_doctor_consulting(doctor, patient_id)
    return list(MedicalFile.objects.filter(owner_id=patient_id).order_by(*NEWEST_FIRST))
