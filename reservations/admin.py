from django.contrib import admin

from reservations.models import (
    AddonService,
    DiscountCode,
    MaintenanceWindow,
    ParkingCategory,
    Reservation,
    SpecialPrice,
    VIPProfile,
)


class SpecialPriceInline(admin.TabularInline):
    model = SpecialPrice
    extra = 1


@admin.register(ParkingCategory)
class ParkingCategoryAdmin(admin.ModelAdmin):
    list_display = ["name", "code", "total_capacity", "base_price_per_day", "is_active"]
    list_filter = ["is_active"]
    search_fields = ["name", "code"]
    inlines = [SpecialPriceInline]

    def get_readonly_fields(self, request, obj=None):
        # Capacity changes on saved categories go through CategoryService.change_capacity.
        if obj is not None:
            return ["total_capacity"]
        return []


@admin.register(MaintenanceWindow)
class MaintenanceWindowAdmin(admin.ModelAdmin):
    list_display = ["start_date", "end_date", "reason", "is_active"]
    list_filter = ["is_active"]
    filter_horizontal = ["affected_categories"]


@admin.register(AddonService)
class AddonServiceAdmin(admin.ModelAdmin):
    list_display = ["name", "price", "pricing", "is_free", "is_active", "sort_order"]
    list_filter = ["pricing", "is_active"]


@admin.register(DiscountCode)
class DiscountCodeAdmin(admin.ModelAdmin):
    list_display = ["code", "discount_type", "discount_value", "valid_from", "valid_to", "current_usage", "max_usage"]
    list_filter = ["discount_type", "is_active"]
    search_fields = ["code", "name"]
    readonly_fields = ["current_usage"]
    filter_horizontal = ["applicable_categories"]


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = ["booking_reference", "category", "check_in_at", "check_out_at", "status", "total_price", "is_manual"]
    list_filter = ["status", "is_manual", "category"]
    search_fields = ["booking_reference", "license_plate", "phone"]
    readonly_fields = ["booking_reference", "category", "check_in_at", "check_out_at", "total_price", "price_breakdown"]

    def has_add_permission(self, request):
        return False


@admin.register(VIPProfile)
class VIPProfileAdmin(admin.ModelAdmin):
    list_display = ["vip_code", "phone", "discount_pct", "issued_year"]
    search_fields = ["vip_code", "phone"]
    readonly_fields = ["vip_code"]
