"""
Vitals, notes and prescriptions.

Every read or write is gated before the database is touched: patients
may only reach their own data, doctors only data of patients they are
consulting (see :func:`core.services.consult.ensure_doctor_consulting`).
Notes and prescriptions are visible to the patient and to the doctor
who wrote them, not to other doctors of the same patient.
"""
from __future__ import annotations

import logging

from core.errors import Forbidden
from core.models import Note, Prescription, User, VitalRecord
from core.services.consult import ensure_doctor_consulting

logger = logging.getLogger(__name__)

NEWEST_FIRST = ('-created_at', '-id')
OLDEST_FIRST = ('created_at', 'id')


def _ensure_self(user, patient_id, message: str) -> None:
    if getattr(user, 'role', '') != User.ROLE_PATIENT or user.id != patient_id:
        raise Forbidden(message)


def format_vital(v: VitalRecord) -> dict:
    return {
        'id': v.id,
        'patientId': v.patient_id,
        'bp': v.bp,
        'sugar': v.sugar,
        'heartRate': v.heart_rate,
        'createdAt': v.created_at.isoformat(),
    }


def _format_author(doctor: User) -> dict:
    return {'id': doctor.id, 'name': doctor.name, 'email': doctor.email}


def format_note(n: Note) -> dict:
    return {
        'id': n.id,
        'patientId': n.patient_id,
        'doctor': _format_author(n.doctor),
        'content': n.content,
        'createdAt': n.created_at.isoformat(),
    }


def format_prescription(p: Prescription) -> dict:
    return {
        'id': p.id,
        'patientId': p.patient_id,
        'doctor': _format_author(p.doctor),
        'medications': p.medications,
        'instructions': p.instructions,
        'createdAt': p.created_at.isoformat(),
    }


# ---------------------------------------------------------------------
# Vitals
# ---------------------------------------------------------------------
def add_vital(patient, *, bp: str, sugar: str, heart_rate: str) -> VitalRecord:
    if getattr(patient, 'role', '') != User.ROLE_PATIENT:
        raise Forbidden('Only patients can record vitals.')
    return VitalRecord.objects.create(patient_id=patient.id, bp=bp, sugar=sugar, heart_rate=heart_rate)


def list_vitals(user, patient_id) -> list[VitalRecord]:
    if getattr(user, 'role', '') == User.ROLE_DOCTOR:
        ensure_doctor_consulting(user, patient_id)
    else:
        _ensure_self(user, patient_id, 'Access denied. Not authorized to view these vitals.')
    return list(VitalRecord.objects.filter(patient_id=patient_id).order_by(*NEWEST_FIRST))


# ---------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------
def add_note(doctor, patient_id, content: str) -> Note:
    ensure_doctor_consulting(doctor, patient_id)
    note = Note.objects.create(patient_id=patient_id, doctor_id=doctor.id, content=content)
    logger.info('note %s added doctor=%s patient=%s', note.id, doctor.id, patient_id)
    return Note.objects.select_related('doctor').get(id=note.id)


def list_notes(user, patient_id) -> list[Note]:
    qs = Note.objects.filter(patient_id=patient_id).select_related('doctor')
    if getattr(user, 'role', '') == User.ROLE_DOCTOR:
        ensure_doctor_consulting(user, patient_id)
        qs = qs.filter(doctor_id=user.id)
    else:
        _ensure_self(user, patient_id, 'Access denied. Not authorized to view these notes.')
    return list(qs.order_by(*NEWEST_FIRST))


# ---------------------------------------------------------------------
# Prescriptions
# ---------------------------------------------------------------------
def add_prescription(doctor, patient_id, *, medications: str, instructions: str) -> Prescription:
    ensure_doctor_consulting(doctor, patient_id)
    rx = Prescription.objects.create(
        patient_id=patient_id, doctor_id=doctor.id,
        medications=medications, instructions=instructions,
    )
    logger.info('prescription %s issued doctor=%s patient=%s', rx.id, doctor.id, patient_id)
    return Prescription.objects.select_related('doctor').get(id=rx.id)


def list_prescriptions(user, patient_id) -> list[Prescription]:
    qs = Prescription.objects.filter(patient_id=patient_id).select_related('doctor')
    if getattr(user, 'role', '') == User.ROLE_DOCTOR:
        ensure_doctor_consulting(user, patient_id)
        qs = qs.filter(doctor_id=user.id)
    else:
        _ensure_self(user, patient_id, 'Access denied. Not authorized to view these prescriptions.')
    return list(qs.order_by(*NEWEST_FIRST))
