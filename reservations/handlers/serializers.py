"""Serializers for request parsing and for rendering domain models."""

from rest_framework import serializers

from reservations.domain import ReservationStatus


class PriceLineSerializer(serializers.Serializer):
    kind = serializers.CharField()
    label = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    date = serializers.DateField(source="day", allow_null=True)


class PriceQuoteSerializer(serializers.Serializer):
    """Serializer for PriceQuote domain model."""

    total = serializers.DecimalField(source="total.amount", max_digits=12, decimal_places=2)
    currency = serializers.SerializerMethodField()
    billing_days = serializers.IntegerField()
    parking_subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    addon_subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    vip_discount = serializers.DecimalField(max_digits=12, decimal_places=2)
    promo_discount = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount_code = serializers.CharField(allow_null=True)
    breakdown = PriceLineSerializer(many=True)

    def get_currency(self, obj) -> str:
        return self.context.get("currency", "")


class MaintenanceWindowSerializer(serializers.Serializer):
    """Serializer for MaintenanceWindow domain model."""

    id = serializers.CharField()
    start_date = serializers.DateField(source="date_range.start")
    end_date = serializers.DateField(source="date_range.end")
    reason = serializers.CharField()
    description = serializers.CharField()


class AvailabilitySerializer(serializers.Serializer):
    available = serializers.BooleanField()
    available_count = serializers.IntegerField()
    reason = serializers.CharField(allow_null=True)
    maintenance_windows = MaintenanceWindowSerializer(many=True)


class ReservationSerializer(serializers.Serializer):
    """Serializer for Reservation domain model."""

    id = serializers.UUIDField(source="id.value")
    category_id = serializers.UUIDField(source="category_id.value")
    booking_reference = serializers.CharField()
    status = serializers.SerializerMethodField()
    check_in_at = serializers.DateTimeField()
    check_out_at = serializers.DateTimeField()
    driver_name = serializers.CharField(source="customer.driver_name")
    phone = serializers.CharField(source="customer.phone")
    email = serializers.CharField(source="customer.email")
    license_plate = serializers.CharField(source="customer.license_plate")
    passenger_count = serializers.IntegerField(source="customer.passenger_count")
    luggage_count = serializers.IntegerField(source="customer.luggage_count")
    flight_number = serializers.CharField(source="customer.flight_number")
    notes = serializers.CharField(source="customer.notes")
    addon_ids = serializers.ListField(child=serializers.CharField())
    total_price = serializers.DecimalField(
        source="total_price.amount", max_digits=12, decimal_places=2
    )
    price_breakdown = PriceLineSerializer(many=True)
    discount_code = serializers.CharField(allow_null=True)
    vip_code = serializers.CharField(allow_null=True)
    is_manual = serializers.BooleanField()
    created_by = serializers.CharField()
    actual_check_in_at = serializers.DateTimeField(allow_null=True)
    actual_check_out_at = serializers.DateTimeField(allow_null=True)
    created_at = serializers.DateTimeField(allow_null=True)

    def get_status(self, obj) -> str:
        return obj.status.value


class ParkingCategorySerializer(serializers.Serializer):
    """Serializer for ParkingCategory domain model."""

    id = serializers.UUIDField(source="id.value")
    code = serializers.CharField()
    name = serializers.CharField()
    total_capacity = serializers.IntegerField(source="total_capacity.value")
    base_price_per_day = serializers.DecimalField(
        source="base_price_per_day.amount", max_digits=12, decimal_places=2
    )
    billing_unit_hours = serializers.IntegerField()
    is_active = serializers.BooleanField()


class VIPProfileSerializer(serializers.Serializer):
    """Serializer for VIPProfile domain model."""

    vip_code = serializers.CharField()
    phone = serializers.CharField()
    discount_pct = serializers.DecimalField(max_digits=5, decimal_places=2)
    issued_year = serializers.IntegerField()
    customer_ref = serializers.CharField()


# Request bodies


class IntervalRequestSerializer(serializers.Serializer):
    category_id = serializers.UUIDField()
    check_in_at = serializers.DateTimeField()
    check_out_at = serializers.DateTimeField()


class AvailabilityRequestSerializer(IntervalRequestSerializer):
    units = serializers.IntegerField(min_value=1, default=1)


class QuoteRequestSerializer(IntervalRequestSerializer):
    addon_ids = serializers.ListField(child=serializers.UUIDField(), default=list)
    vip_code = serializers.CharField(required=False, allow_blank=True, default="")
    discount_code = serializers.CharField(required=False, allow_blank=True, default="")
    luggage_count = serializers.IntegerField(min_value=0, default=0)


class ReservationCreateSerializer(QuoteRequestSerializer):
    driver_name = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=50)
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    license_plate = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    passenger_count = serializers.IntegerField(min_value=1, default=1)
    flight_number = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    manual = serializers.BooleanField(default=False)
    created_by = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class StatusTransitionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[status.value for status in ReservationStatus])
    admin_override = serializers.BooleanField(default=False)


class VIPCodeRequestSerializer(serializers.Serializer):
    phone = serializers.CharField(max_length=50)
    year = serializers.IntegerField(min_value=1, max_value=9999, required=False)
    customer_ref = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    discount_pct = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False
    )


class CapacityChangeSerializer(serializers.Serializer):
    total_capacity = serializers.IntegerField(min_value=0)
