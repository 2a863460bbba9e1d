"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

import uuid

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


def validate_date_range(start_date, end_date) -> None:
    if start_date and end_date and end_date < start_date:
        raise ValidationError({"end_date": "End date must not be before the start date."})


class ParkingCategory(models.Model):
    """Persistence model for parking categories."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    total_capacity = models.PositiveIntegerField()
    base_price_per_day = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0)]
    )
    billing_unit_hours = models.PositiveSmallIntegerField(default=24)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "parking categories"

    def __str__(self) -> str:
        return self.name


class SpecialPrice(models.Model):
    """Persistence model for date-scoped price overrides."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    category = models.ForeignKey(
        ParkingCategory, on_delete=models.CASCADE, related_name="special_prices"
    )
    start_date = models.DateField()
    end_date = models.DateField()
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    reason = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["start_date", "-created_at"]
        indexes = [
            models.Index(
                fields=["category", "start_date", "end_date"], name="special_price_cat_dates_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="special_price_end_after_start",
            ),
        ]

    def clean(self):
        validate_date_range(self.start_date, self.end_date)

    def __str__(self) -> str:
        return f"{self.category.code} {self.start_date}..{self.end_date} - {self.price}"


class MaintenanceWindow(models.Model):
    """Persistence model for maintenance closures."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    start_date = models.DateField()
    end_date = models.DateField()
    reason = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    affected_categories = models.ManyToManyField(
        ParkingCategory, blank=True, related_name="maintenance_windows"
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-start_date"]
        indexes = [
            models.Index(fields=["is_active", "start_date"], name="maint_active_start_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="maint_end_after_start",
            ),
        ]

    def clean(self):
        validate_date_range(self.start_date, self.end_date)

    def __str__(self) -> str:
        return f"{self.start_date}..{self.end_date} - {self.reason}"


class AddonService(models.Model):
    """Persistence model for optional extra services."""

    class Pricing(models.TextChoices):
        FLAT = "flat", "Flat"
        PER_DAY = "per_day", "Per day"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    pricing = models.CharField(max_length=10, choices=Pricing.choices, default=Pricing.FLAT)
    is_free = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["sort_order", "name"]

    def __str__(self) -> str:
        return self.name


class DiscountCode(models.Model):
    """Persistence model for promotional codes."""

    class DiscountType(models.TextChoices):
        PERCENTAGE = "percentage", "Percentage"
        FIXED = "fixed", "Fixed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=255)
    discount_type = models.CharField(max_length=10, choices=DiscountType.choices)
    discount_value = models.DecimalField(max_digits=10, decimal_places=2)
    max_discount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    min_order_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    valid_from = models.DateTimeField()
    valid_to = models.DateTimeField()
    max_usage = models.PositiveIntegerField(null=True, blank=True, help_text="Empty means unlimited")
    current_usage = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    applicable_categories = models.ManyToManyField(
        ParkingCategory, blank=True, related_name="discount_codes"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def save(self, *args, **kwargs):
        self.code = self.code.strip().upper()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.code


class Reservation(models.Model):
    """Persistence model for reservations."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        CHECKED_IN = "checked-in", "Checked in"
        CHECKED_OUT = "checked-out", "Checked out"
        CANCELLED = "cancelled", "Cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    category = models.ForeignKey(
        ParkingCategory, on_delete=models.PROTECT, related_name="reservations"
    )
    booking_reference = models.CharField(max_length=100, unique=True)
    check_in_at = models.DateTimeField()
    check_out_at = models.DateTimeField()
    driver_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=50)
    email = models.CharField(max_length=255, blank=True)
    license_plate = models.CharField(max_length=50, blank=True)
    passenger_count = models.PositiveSmallIntegerField(default=1)
    luggage_count = models.PositiveSmallIntegerField(default=0)
    flight_number = models.CharField(max_length=20, blank=True)
    notes = models.TextField(blank=True)
    addon_ids = models.JSONField(default=list, blank=True)
    price_breakdown = models.JSONField(default=list, blank=True)
    total_price = models.DecimalField(max_digits=10, decimal_places=2)
    discount_code = models.CharField(max_length=50, blank=True)
    vip_code = models.CharField(max_length=32, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    is_manual = models.BooleanField(default=False)
    created_by = models.CharField(max_length=255, blank=True)
    actual_check_in_at = models.DateTimeField(null=True, blank=True)
    actual_check_out_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["category", "check_in_at", "check_out_at"], name="resv_cat_interval_idx"
            ),
            models.Index(fields=["status"], name="resv_status_idx"),
            models.Index(fields=["license_plate", "phone"], name="resv_plate_phone_idx"),
        ]

    def __str__(self) -> str:
        return self.booking_reference


class VIPProfile(models.Model):
    """Persistence model for VIP memberships."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    vip_code = models.CharField(max_length=32, unique=True)
    phone = models.CharField(max_length=50)
    customer_ref = models.CharField(max_length=255, blank=True)
    discount_pct = models.DecimalField(max_digits=5, decimal_places=2)
    issued_year = models.PositiveSmallIntegerField()
    created_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "VIP profile"

    def __str__(self) -> str:
        return self.vip_code
