import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ParkingCategory",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code", models.CharField(max_length=50, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("total_capacity", models.PositiveIntegerField()),
                (
                    "base_price_per_day",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("billing_unit_hours", models.PositiveSmallIntegerField(default=24)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "verbose_name_plural": "parking categories",
            },
        ),
        migrations.CreateModel(
            name="AddonService",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "pricing",
                    models.CharField(
                        choices=[("flat", "Flat"), ("per_day", "Per day")],
                        default="flat",
                        max_length=10,
                    ),
                ),
                ("is_free", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("sort_order", models.PositiveIntegerField(default=0)),
            ],
            options={
                "ordering": ["sort_order", "name"],
            },
        ),
        migrations.CreateModel(
            name="VIPProfile",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("vip_code", models.CharField(max_length=32, unique=True)),
                ("phone", models.CharField(max_length=50)),
                ("customer_ref", models.CharField(blank=True, max_length=255)),
                ("discount_pct", models.DecimalField(decimal_places=2, max_digits=5)),
                ("issued_year", models.PositiveSmallIntegerField()),
                ("created_at", models.DateTimeField()),
            ],
            options={
                "ordering": ["-created_at"],
                "verbose_name": "VIP profile",
            },
        ),
        migrations.CreateModel(
            name="SpecialPrice",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="special_prices",
                        to="reservations.parkingcategory",
                    ),
                ),
            ],
            options={
                "ordering": ["start_date", "-created_at"],
                "indexes": [
                    models.Index(
                        fields=["category", "start_date", "end_date"],
                        name="special_price_cat_dates_idx",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="MaintenanceWindow",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("reason", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "affected_categories",
                    models.ManyToManyField(
                        blank=True,
                        related_name="maintenance_windows",
                        to="reservations.parkingcategory",
                    ),
                ),
            ],
            options={
                "ordering": ["-start_date"],
                "indexes": [
                    models.Index(fields=["is_active", "start_date"], name="maint_active_start_idx")
                ],
            },
        ),
        migrations.CreateModel(
            name="DiscountCode",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code", models.CharField(max_length=50, unique=True)),
                ("name", models.CharField(max_length=255)),
                (
                    "discount_type",
                    models.CharField(
                        choices=[("percentage", "Percentage"), ("fixed", "Fixed")],
                        max_length=10,
                    ),
                ),
                ("discount_value", models.DecimalField(decimal_places=2, max_digits=10)),
                ("max_discount", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("min_order_amount", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("valid_from", models.DateTimeField()),
                ("valid_to", models.DateTimeField()),
                (
                    "max_usage",
                    models.PositiveIntegerField(blank=True, help_text="Empty means unlimited", null=True),
                ),
                ("current_usage", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "applicable_categories",
                    models.ManyToManyField(
                        blank=True,
                        related_name="discount_codes",
                        to="reservations.parkingcategory",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Reservation",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("booking_reference", models.CharField(max_length=100, unique=True)),
                ("check_in_at", models.DateTimeField()),
                ("check_out_at", models.DateTimeField()),
                ("driver_name", models.CharField(max_length=255)),
                ("phone", models.CharField(max_length=50)),
                ("email", models.CharField(blank=True, max_length=255)),
                ("license_plate", models.CharField(blank=True, max_length=50)),
                ("passenger_count", models.PositiveSmallIntegerField(default=1)),
                ("luggage_count", models.PositiveSmallIntegerField(default=0)),
                ("flight_number", models.CharField(blank=True, max_length=20)),
                ("notes", models.TextField(blank=True)),
                ("addon_ids", models.JSONField(blank=True, default=list)),
                ("price_breakdown", models.JSONField(blank=True, default=list)),
                ("total_price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("discount_code", models.CharField(blank=True, max_length=50)),
                ("vip_code", models.CharField(blank=True, max_length=32)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("checked-in", "Checked in"),
                            ("checked-out", "Checked out"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("is_manual", models.BooleanField(default=False)),
                ("created_by", models.CharField(blank=True, max_length=255)),
                ("actual_check_in_at", models.DateTimeField(blank=True, null=True)),
                ("actual_check_out_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to="reservations.parkingcategory",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["category", "check_in_at", "check_out_at"],
                        name="resv_cat_interval_idx",
                    ),
                    models.Index(fields=["status"], name="resv_status_idx"),
                    models.Index(fields=["license_plate", "phone"], name="resv_plate_phone_idx"),
                ],
            },
        ),
    ]
