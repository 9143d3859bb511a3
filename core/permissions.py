"""
Custom permission classes for role based access control.

Relationship-based checks (is this doctor consulting this patient?)
live in :mod:`core.services.consult`; these classes only look at the
role carried by the bearer token.
"""
from rest_framework.permissions import BasePermission

PATIENT_ROLE = "patient"
DOCTOR_ROLE = "doctor"


class IsPatientRole(BasePermission):
    """Allow access only to users with the patient role."""
    message = "Access denied. Patients only."

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == PATIENT_ROLE)


class IsDoctorRole(BasePermission):
    """Allow access only to users with the doctor role."""
    message = "Access denied. Doctors only."

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == DOCTOR_ROLE)
