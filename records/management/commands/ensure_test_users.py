"""
Create (or reset) one login per role for local testing.
"""
from django.core.management.base import BaseCommand
from django.contrib.auth.hashers import make_password
from records.models import User

TEST_SET = [
    ("staff1", "staff"),
    ("admin1", "admin"),
    ("super", "super"),
]


class Command(BaseCommand):
    help = "Ensure one test user per role exists with a known password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="123456", help="Password set on every test user")

    def handle(self, *args, **opts):
        password = make_password(opts["password"])
        for username, role in TEST_SET:
            u, created = User.objects.update_or_create(
                username=username,
                defaults={"role": role, "password": password, "is_active": True},
            )
            # backup 与 DPR 接口需要管理员角色
            self.stdout.write(self.style.SUCCESS(f"{'created' if created else 'reset'}: {username} ({role})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
