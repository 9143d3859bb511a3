"""
Database models for the MediCore backend.

Users are either patients or doctors.  The doctor/patient relationship
lives in a single :class:`Consultation` row per pair, so the
"consulted" and "pending" sets seen from either side are always mirror
images of each other.  Clinical data (vitals, notes, prescriptions,
files) is append-only.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models


class UserManager(BaseUserManager):
    """Manager for the email-keyed :class:`User` model."""

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('email is required')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('name', email)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """Patient or doctor identity.

    Login is by email.  ``specialty`` is only meaningful for doctors and
    is required for them at registration time.
    """
    ROLE_PATIENT = 'patient'
    ROLE_DOCTOR = 'doctor'
    ROLE_CHOICES = [
        (ROLE_PATIENT, 'Patient'),
        (ROLE_DOCTOR, 'Doctor'),
    ]

    username = None
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)
    specialty = models.CharField(max_length=255, blank=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    objects = UserManager()

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"

    @property
    def is_doctor(self) -> bool:
        return self.role == self.ROLE_DOCTOR

    @property
    def is_patient(self) -> bool:
        return self.role == self.ROLE_PATIENT

    def _partner_links(self, status: str):
        if self.is_doctor:
            return Consultation.objects.filter(doctor_id=self.id, status=status)
        return Consultation.objects.filter(patient_id=self.id, status=status)

    def _partner_ids(self, status: str, order_by: tuple[str, ...]) -> list[int]:
        field = 'patient_id' if self.is_doctor else 'doctor_id'
        return list(self._partner_links(status).order_by(*order_by).values_list(field, flat=True))

    @property
    def consulted_ids(self) -> list[int]:
        """Accepted consultation partners, in acceptance order."""
        return self._partner_ids(Consultation.STATUS_CONSULTED, ('accepted_at', 'id'))

    @property
    def pending_ids(self) -> list[int]:
        """Other party of every outstanding request, oldest request first."""
        return self._partner_ids(Consultation.STATUS_PENDING, ('created_at', 'id'))


class Consultation(models.Model):
    """The relationship between one patient and one doctor.

    No row means no relation.  A patient request creates a ``pending``
    row; a doctor accepts (``consulted``) or rejects (row deleted).
    """
    STATUS_PENDING = 'pending'
    STATUS_CONSULTED = 'consulted'
    STATUS_CHOICES = ((STATUS_PENDING, 'pending'), (STATUS_CONSULTED, 'consulted'))

    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='doctor_links')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='patient_links')
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)

    created_at = models.DateTimeField(auto_now_add=True)
    accepted_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['patient', 'doctor'], name='unique_consultation_pair'),
        ]
        indexes = [
            models.Index(fields=['doctor', 'status', 'created_at'], name='consult_doctor_status_idx'),
            models.Index(fields=['patient', 'status', 'created_at'], name='consult_patient_status_idx'),
        ]

    def __str__(self):
        return f"consult d={self.doctor_id} p={self.patient_id} {self.status}"


class VitalRecord(models.Model):
    """A patient-submitted measurement snapshot.  Values are free-form strings."""
    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='vitals')
    bp = models.CharField(max_length=32)
    sugar = models.CharField(max_length=32)
    heart_rate = models.CharField(max_length=32)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['patient', 'created_at'], name='vital_patient_created_idx')]

    def __str__(self):
        return f"vitals p={self.patient_id} bp={self.bp}"


class Note(models.Model):
    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notes_received')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notes_written')
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['patient', 'created_at'], name='note_patient_created_idx')]

    def __str__(self):
        return f"note {self.id} d={self.doctor_id} p={self.patient_id}"


class Prescription(models.Model):
    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='prescriptions_received')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='prescriptions_written')
    # One medication per line
    medications = models.TextField()
    instructions = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['patient', 'created_at'], name='rx_patient_created_idx')]

    def __str__(self):
        return f"rx {self.id} d={self.doctor_id} p={self.patient_id}"


class MedicalFile(models.Model):
    """Metadata for an uploaded file; the bytes live in the configured storage."""
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='files')
    file_name = models.CharField(max_length=255)
    storage_key = models.CharField(max_length=512, unique=True)
    file_url = models.CharField(max_length=1024)
    content_type = models.CharField(max_length=128, blank=True)
    size = models.PositiveBigIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['owner', 'created_at'], name='file_owner_created_idx')]

    def __str__(self):
        return f"file {self.id} owner={self.owner_id} {self.file_name}"
