"""Store-level guard against double bookings.

PostgreSQL only: an exclusion constraint rejects any second occupying
booking whose [start_at, end_at) range overlaps another one for the same
equipment. Other databases rely on row locks taken by the submission
workflow.
"""

from django.db import migrations

CONSTRAINT_NAME = "booking_no_overlap"

OCCUPYING = "('pending', 'approved', 'active')"


def add_exclusion_constraint(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    schema_editor.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    schema_editor.execute(
        f"ALTER TABLE bookings_booking ADD CONSTRAINT {CONSTRAINT_NAME} "
        "EXCLUDE USING gist ("
        "equipment_id WITH =, "
        "tstzrange(start_at, end_at, '[)') WITH &&"
        f") WHERE (status IN {OCCUPYING})"
    )


def drop_exclusion_constraint(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    schema_editor.execute(f"ALTER TABLE bookings_booking DROP CONSTRAINT IF EXISTS {CONSTRAINT_NAME}")


class Migration(migrations.Migration):

    dependencies = [
        ("bookings", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(add_exclusion_constraint, drop_exclusion_constraint),
    ]
