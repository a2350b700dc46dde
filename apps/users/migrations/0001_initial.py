from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Profile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "status",
                    models.CharField(
                        choices=[("approved", "Approved"), ("pending", "Waiting for approval"), ("suspended", "Suspended")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "role",
                    models.CharField(
                        choices=[("user", "User"), ("staff", "Staff"), ("admin", "Administrator")],
                        default="user",
                        max_length=20,
                    ),
                ),
                (
                    "requester_type",
                    models.CharField(
                        choices=[("student", "Student"), ("lecturer", "Lecturer"), ("staff", "Staff")],
                        default="student",
                        help_text="Selects the loan limits that apply to this user.",
                        max_length=20,
                    ),
                ),
                ("department", models.CharField(blank=True, max_length=150)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Profile",
                "verbose_name_plural": "Profiles",
                "indexes": [models.Index(fields=["status"], name="users_profile_status_idx")],
            },
        ),
    ]
