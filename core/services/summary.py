"""
AI health summary for a consulted patient.

The patient's vitals, notes and file names are rendered oldest-first
into a plain-text prompt and sent to a chat-completions endpoint
(Mistral by default).  Any failure of that collaborator surfaces as
:class:`core.errors.ServiceUnavailable`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import requests
from django.conf import settings

from core.errors import NotFound, ServiceUnavailable
from core.models import MedicalFile, Note, User, VitalRecord
from core.services.consult import ensure_doctor_consulting
from core.services.records import OLDEST_FIRST

logger = logging.getLogger(__name__)


@dataclass
class PatientHistory:
    patient: User
    vitals: list
    notes: list
    files: list


def collect_history(patient_id) -> PatientHistory:
    patient = User.objects.filter(id=patient_id, role=User.ROLE_PATIENT).first()
    if patient is None:
        raise NotFound('Patient not found.')
    return PatientHistory(
        patient=patient,
        vitals=list(VitalRecord.objects.filter(patient_id=patient_id).order_by(*OLDEST_FIRST)),
        notes=list(Note.objects.filter(patient_id=patient_id).select_related('doctor').order_by(*OLDEST_FIRST)),
        files=list(MedicalFile.objects.filter(owner_id=patient_id).order_by(*OLDEST_FIRST)),
    )


def _day(dt) -> str:
    return dt.date().isoformat()


def build_prompt(history: PatientHistory) -> str:
    p = history.patient
    lines = [
        f"Generate a concise health summary for the patient '{p.name}' (Email: {p.email}).",
        "",
        "Include current and past health conditions based on the provided data. "
        "Highlight any significant trends or concerns.",
        "",
    ]
    if history.vitals:
        lines.append("Vitals History:")
        lines += [f"- {_day(v.created_at)}: BP {v.bp}, Sugar {v.sugar}, HR {v.heart_rate}" for v in history.vitals]
        lines.append("")
    if history.notes:
        lines.append("Doctor's Notes:")
        lines += [f"- {_day(n.created_at)} (Dr. {n.doctor.name}): {n.content}" for n in history.notes]
        lines.append("")
    if history.files:
        lines.append("Uploaded Files (names):")
        lines += [f"- {f.file_name} ({_day(f.created_at)})" for f in history.files]
        lines.append("")
    lines.append(
        "Based on this, provide a concise summary of the patient's health status, key health events, "
        "and any notable observations. Focus on clinically relevant information."
    )
    return "\n".join(lines)


def complete(prompt: str) -> str:
    """Send ``prompt`` to the summarization endpoint and return its text."""
    if not settings.MISTRAL_API_KEY:
        raise ServiceUnavailable('Summary service is not configured.')
    payload = {
        'model': settings.MISTRAL_MODEL,
        'messages': [{'role': 'user', 'content': prompt}],
        'temperature': 0.7,
        'max_tokens': settings.SUMMARY_MAX_TOKENS,
    }
    headers = {'Authorization': f'Bearer {settings.MISTRAL_API_KEY}'}
    try:
        r = requests.post(settings.MISTRAL_API_URL, json=payload, headers=headers, timeout=settings.SUMMARY_TIMEOUT)
        r.raise_for_status()
        data = r.json()
    except requests.RequestException as e:
        logger.warning('summary request failed: %s', e)
        raise ServiceUnavailable('Failed to generate summary.') from e
    except ValueError as e:
        logger.warning('summary response is not JSON: %s', e)
        raise ServiceUnavailable('Failed to generate summary.') from e

    try:
        text = data['choices'][0]['message']['content']
    except (KeyError, IndexError, TypeError):
        logger.warning('unexpected summary response: %r', data)
        raise ServiceUnavailable('Failed to generate summary.')
    if not text:
        raise ServiceUnavailable('Failed to generate summary.')
    return text


def generate_summary(doctor, patient_id) -> str:
    ensure_doctor_consulting(doctor, patient_id)
    history = collect_history(patient_id)
    prompt = build_prompt(history)
    logger.info('summary requested doctor=%s patient=%s prompt_chars=%s', doctor.id, patient_id, len(prompt))
    return complete(prompt)
