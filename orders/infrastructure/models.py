"""
Order model.
"""
from decimal import Decimal

from django.core.validators import MinLengthValidator, MinValueValidator, RegexValidator
from django.db import models
from django.utils import timezone


class Order(models.Model):
    """
    A purchase attempt paid by manual bank transfer.

    The license key is filled in once, when the order is completed.
    """

    STATUS_CHOICES = [
        ("PENDING", "Pending"),
        ("COMPLETED", "Completed"),
    ]

    TYPE_CHOICES = [
        ("M", "Monthly"),
        ("Y", "Yearly"),
        ("P", "Perpetual"),
    ]

    id = models.CharField(
        primary_key=True,
        max_length=6,
        validators=[RegexValidator(r"^TT\d{4}$")],
        editable=False,
    )
    machine_id = models.CharField(max_length=500, validators=[MinLengthValidator(8)])
    email = models.EmailField()
    license_type = models.CharField(max_length=1, choices=TYPE_CHOICES)
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="PENDING", db_index=True)
    license_key = models.TextField(null=True, blank=True)
    notified_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        app_label = "orders"
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="orders_status_0f5c1e_idx"),
            models.Index(fields=["email"], name="orders_email_8b2d47_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(status="COMPLETED", license_key__isnull=False)
                    | models.Q(status="PENDING", license_key__isnull=True)
                ),
                name="orders_license_key_iff_completed",
            ),
        ]

    def __str__(self):
        return f"{self.id} ({self.status})"

    @property
    def is_completed(self) -> bool:
        """Check if the order has been fulfilled."""
        return self.status == "COMPLETED"
