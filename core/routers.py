"""
URL mappings for the MediCore API.

Paths carry no trailing slash.  A few routes are registered twice under
the older ``add``/``my`` spellings still used by existing clients.
"""
from django.urls import include, path

from .auth_views import auth_health_view, login_view, register_view
from .views import consult, doctors, files, health, records

urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz),

    # auth
    path('api/auth/register', register_view, name='auth-register'),
    path('api/auth/login', login_view, name='auth-login'),
    path('api/auth/health', auth_health_view, name='auth-health'),

    # patient records
    path('api/records', records.add_vital_view, name='records-add'),
    path('api/records/add', records.add_vital_view),
    path('api/records/mine', records.my_vitals_view, name='records-mine'),
    path('api/records/my', records.my_vitals_view),
    path('api/patients/<int:patient_id>/notes', records.patient_notes_view, name='patient-notes'),
    path('api/patients/<int:patient_id>/prescriptions', records.patient_prescriptions_view,
         name='patient-prescriptions'),

    # files
    path('api/files/upload', files.upload_view, name='files-upload'),
    path('api/files/mine', files.my_files_view, name='files-mine'),
    path('api/files/my', files.my_files_view),

    # consultations
    path('api/consultations/search-doctors', consult.search_doctors_view, name='consult-search-doctors'),
    path('api/consultations/request/<int:doctor_id>', consult.request_consultation_view, name='consult-request'),
    path('api/consultations/pending', consult.pending_view, name='consult-pending'),
    path('api/consultations/respond/<int:patient_id>', consult.respond_view, name='consult-respond'),
    path('api/consultations/my-doctors', consult.my_doctors_view, name='consult-my-doctors'),

    # doctor workspace
    path('api/doctor/my-patients', doctors.my_patients_view, name='doctor-my-patients'),
    path('api/doctor/patient/<int:patient_id>/vitals', doctors.patient_vitals_view, name='doctor-patient-vitals'),
    path('api/doctor/patient/<int:patient_id>/files', doctors.patient_files_view, name='doctor-patient-files'),
    path('api/doctor/patient/<int:patient_id>/notes', doctors.patient_notes_view, name='doctor-patient-notes'),
    path('api/doctor/patient/<int:patient_id>/prescriptions', doctors.patient_prescriptions_view,
         name='doctor-patient-prescriptions'),
    path('api/doctor/patient/<int:patient_id>/summary', doctors.patient_summary_view,
         name='doctor-patient-summary'),
]
