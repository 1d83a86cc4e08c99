from decimal import Decimal

import django.core.validators
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                (
                    "id",
                    models.CharField(
                        editable=False,
                        max_length=6,
                        primary_key=True,
                        serialize=False,
                        validators=[django.core.validators.RegexValidator("^TT\\d{4}$")],
                    ),
                ),
                (
                    "machine_id",
                    models.CharField(
                        max_length=500,
                        validators=[django.core.validators.MinLengthValidator(8)],
                    ),
                ),
                ("email", models.EmailField(max_length=254)),
                (
                    "license_type",
                    models.CharField(
                        choices=[("M", "Monthly"), ("Y", "Yearly"), ("P", "Perpetual")],
                        max_length=1,
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("COMPLETED", "Completed")],
                        db_index=True,
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                ("license_key", models.TextField(blank=True, null=True)),
                ("notified_at", models.DateTimeField(blank=True, null=True)),
                (
                    "created_at",
                    models.DateTimeField(db_index=True, default=django.utils.timezone.now),
                ),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "orders",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="orders_status_0f5c1e_idx"),
                    models.Index(fields=["email"], name="orders_email_8b2d47_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("license_key__isnull", False), ("status", "COMPLETED")),
                            models.Q(("license_key__isnull", True), ("status", "PENDING")),
                            _connector="OR",
                        ),
                        name="orders_license_key_iff_completed",
                    )
                ],
            },
        ),
    ]
