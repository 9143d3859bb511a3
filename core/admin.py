"""
Django admin registrations for the core models.

Exposed at ``/admin/`` so staff can inspect users, consultations and
clinical records during development and support.
"""
from django.contrib import admin

from .models import Consultation, MedicalFile, Note, Prescription, User, VitalRecord


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('id', 'email', 'name', 'role', 'specialty', 'is_staff')
    list_filter = ('role', 'is_staff', 'is_active')
    search_fields = ('email', 'name', 'specialty')
    exclude = ('password',)


@admin.register(Consultation)
class ConsultationAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'status', 'created_at', 'accepted_at')
    list_filter = ('status',)
    search_fields = ('patient__email', 'doctor__email')


@admin.register(VitalRecord)
class VitalRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'bp', 'sugar', 'heart_rate', 'created_at')
    search_fields = ('patient__email',)


@admin.register(Note)
class NoteAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'created_at')
    search_fields = ('patient__email', 'doctor__email', 'content')


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'created_at')
    search_fields = ('patient__email', 'doctor__email', 'medications')


@admin.register(MedicalFile)
class MedicalFileAdmin(admin.ModelAdmin):
    list_display = ('id', 'owner', 'file_name', 'content_type', 'size', 'created_at')
    search_fields = ('owner__email', 'file_name')
