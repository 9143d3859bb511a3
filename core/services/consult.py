"""
Consultation lifecycle between patients and doctors.

Per (patient, doctor) pair: no relation -> pending -> consulted, or
pending -> no relation on reject.  Only patients request, only doctors
respond.  :func:`is_consulting` is the single gate every doctor-side
clinical endpoint goes through.

Mutations lock both users' rows (ascending id) inside one transaction so
concurrent requests touching the same user are applied one at a time.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from core.errors import Conflict, Forbidden, InvalidArgument, NotFound
from core.models import Consultation, User

logger = logging.getLogger(__name__)

ACTION_ACCEPT = 'accept'
ACTION_REJECT = 'reject'
ACTIONS = (ACTION_ACCEPT, ACTION_REJECT)


def _is_doctor(user) -> bool:
    return getattr(user, 'role', '') == User.ROLE_DOCTOR


def _is_patient(user) -> bool:
    return getattr(user, 'role', '') == User.ROLE_PATIENT


def _lock_pair(first_id: int, second_id: int) -> dict[int, User]:
    ids = sorted({first_id, second_id})
    return {u.id: u for u in User.objects.select_for_update().filter(id__in=ids).order_by('id')}


def is_consulting(doctor_id, patient_id) -> bool:
    return Consultation.objects.filter(
        doctor_id=doctor_id, patient_id=patient_id, status=Consultation.STATUS_CONSULTED
    ).exists()


def ensure_doctor_consulting(doctor, patient_id) -> None:
    """Raise Forbidden unless ``doctor`` is consulting ``patient_id``."""
    if not _is_doctor(doctor) or not is_consulting(doctor.id, patient_id):
        raise Forbidden('Access denied. You are not consulting this patient.')


def request_consultation(patient, doctor_id) -> Consultation:
    if not _is_patient(patient):
        raise Forbidden('Only patients can request consultations.')

    with transaction.atomic():
        users = _lock_pair(patient.id, doctor_id)
        doctor = users.get(doctor_id)
        if patient.id not in users or doctor is None or not doctor.is_doctor:
            raise NotFound('Patient or Doctor not found.')

        existing = Consultation.objects.filter(patient_id=patient.id, doctor_id=doctor_id).first()
        if existing is not None:
            if existing.status == Consultation.STATUS_CONSULTED:
                raise Conflict('You are already consulting this doctor.')
            raise Conflict('Consultation request already pending.')

        try:
            with transaction.atomic():
                link = Consultation.objects.create(patient_id=patient.id, doctor_id=doctor_id)
        except IntegrityError:
            # A concurrent request for the same pair won the insert
            raise Conflict('Consultation request already pending.')

    logger.info('consultation requested patient=%s doctor=%s', patient.id, doctor_id)
    return link


def list_pending(doctor) -> list[dict]:
    """Pending requesters for ``doctor``, oldest request first."""
    if not _is_doctor(doctor):
        raise Forbidden('Only doctors can view pending requests.')
    links = (Consultation.objects
             .filter(doctor_id=doctor.id, status=Consultation.STATUS_PENDING)
             .select_related('patient')
             .order_by('created_at', 'id'))
    return [{
        'id': c.patient_id,
        'name': c.patient.name,
        'email': c.patient.email,
        'requestedAt': c.created_at.isoformat(),
    } for c in links]


def respond_consultation(doctor, patient_id, action: Optional[str]) -> str:
    if not _is_doctor(doctor):
        raise Forbidden('Only doctors can respond to consultations.')
    action = (action or '').strip().lower()
    if action not in ACTIONS:
        raise InvalidArgument('Invalid action.')

    with transaction.atomic():
        users = _lock_pair(doctor.id, patient_id)
        patient = users.get(patient_id)
        if doctor.id not in users or patient is None or not patient.is_patient:
            raise NotFound('Doctor or Patient not found.')

        link = Consultation.objects.filter(patient_id=patient_id, doctor_id=doctor.id).first()
        if action == ACTION_ACCEPT:
            if link is None:
                Consultation.objects.create(
                    patient_id=patient_id, doctor_id=doctor.id,
                    status=Consultation.STATUS_CONSULTED, accepted_at=timezone.now(),
                )
            elif link.status == Consultation.STATUS_PENDING:
                link.status = Consultation.STATUS_CONSULTED
                link.accepted_at = timezone.now()
                link.save(update_fields=['status', 'accepted_at'])
        elif link is not None and link.status == Consultation.STATUS_PENDING:
            link.delete()

    logger.info('consultation %sed doctor=%s patient=%s', action, doctor.id, patient_id)
    return action


def search_doctors(caller, query: Optional[str]) -> list[dict]:
    query = (query or '').strip()
    if not query:
        raise InvalidArgument('Search query is required.')
    doctors = (User.objects
               .filter(role=User.ROLE_DOCTOR)
               .filter(Q(name__icontains=query) | Q(specialty__icontains=query))
               .order_by('id'))

    states = dict(Consultation.objects
                  .filter(patient_id=caller.id)
                  .values_list('doctor_id', 'status'))
    return [{
        'id': d.id,
        'name': d.name,
        'email': d.email,
        'specialty': d.specialty,
        'isConsulted': states.get(d.id) == Consultation.STATUS_CONSULTED,
        'isPending': states.get(d.id) == Consultation.STATUS_PENDING,
    } for d in doctors]


def my_doctors(patient) -> list[dict]:
    if not _is_patient(patient):
        raise Forbidden('Only patients can view their doctors.')
    links = (Consultation.objects
             .filter(patient_id=patient.id, status=Consultation.STATUS_CONSULTED)
             .select_related('doctor')
             .order_by('accepted_at', 'id'))
    return [{
        'id': c.doctor_id,
        'name': c.doctor.name,
        'email': c.doctor.email,
        'specialty': c.doctor.specialty,
    } for c in links]


def my_patients(doctor, search: Optional[str] = None) -> list[dict]:
    if not _is_doctor(doctor):
        raise Forbidden('Access denied. Doctors only.')
    links = (Consultation.objects
             .filter(doctor_id=doctor.id, status=Consultation.STATUS_CONSULTED)
             .select_related('patient')
             .order_by('accepted_at', 'id'))
    search = (search or '').strip()
    if search:
        links = links.filter(Q(patient__name__icontains=search) | Q(patient__email__icontains=search))
    return [{
        'id': c.patient_id,
        'name': c.patient.name,
        'email': c.patient.email,
        'role': c.patient.role,
        'consultingSince': c.accepted_at.isoformat() if c.accepted_at else None,
    } for c in links]
