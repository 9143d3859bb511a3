# core/management/commands/ensure_test_users.py
from django.core.management.base import BaseCommand
from django.db import transaction

from core.models import User

TEST_SET = [
    ("patient@medicore.test", "Test Patient", User.ROLE_PATIENT, ""),
    ("doctor@medicore.test", "Test Doctor", User.ROLE_DOCTOR, "Cardiology"),
]


class Command(BaseCommand):
    help = "Ensure a demo patient and doctor exist with the given password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="Medicore123!")

    @transaction.atomic
    def handle(self, *args, **opts):
        password = opts["password"]
        for email, name, role, specialty in TEST_SET:
            u, created = User.objects.get_or_create(
                email=email,
                defaults={"name": name, "role": role, "specialty": specialty, "is_active": True},
            )
            # reset password, role and active flag on every run
            u.set_password(password)
            u.name = name
            u.role = role
            u.specialty = specialty
            u.is_active = True
            u.save()
            state = "created" if created else "updated"
            self.stdout.write(self.style.SUCCESS(f"{state}: {email} ({role})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
