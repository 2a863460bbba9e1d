"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from django.utils import timezone
from rest_framework import exceptions, status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from reservations.conf import get_engine_settings
from reservations.domain import CustomerInfo, ReservationRequest
from reservations.domain.errors import (
    DomainError,
    ErrorCode,
    InvalidDiscountCodeError,
    MaintenanceConflictError,
    ValidationError,
)
from reservations.handlers.serializers import (
    AvailabilityRequestSerializer,
    AvailabilitySerializer,
    CapacityChangeSerializer,
    MaintenanceWindowSerializer,
    ParkingCategorySerializer,
    PriceQuoteSerializer,
    QuoteRequestSerializer,
    ReservationCreateSerializer,
    ReservationSerializer,
    StatusTransitionSerializer,
    VIPCodeRequestSerializer,
    VIPProfileSerializer,
)
from reservations.services import CategoryService, ReservationService, VIPService
from reservations.stores.django_store import DjangoReservationStore
from reservations.stores.snapshot_cache import CachedSnapshotSource

HTTP_STATUS_BY_CODE = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_DISCOUNT_CODE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_VIP_CODE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.CATEGORY_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.RESERVATION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CATEGORY_INACTIVE: status.HTTP_409_CONFLICT,
    ErrorCode.MAINTENANCE_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.CAPACITY_EXCEEDED: status.HTTP_409_CONFLICT,
    ErrorCode.IDENTITY_COLLISION: status.HTTP_409_CONFLICT,
    ErrorCode.VIP_CODE_COLLISION: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.PRICING_CONFIGURATION: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(error: DomainError) -> Response:
    body = {"code": error.code.value, "message": error.message}
    if isinstance(error, ValidationError) and error.field:
        body["field"] = error.field
    if isinstance(error, MaintenanceConflictError):
        body["maintenance_windows"] = MaintenanceWindowSerializer(error.windows, many=True).data
    if isinstance(error, InvalidDiscountCodeError):
        body["reason"] = error.reason
    return Response(body, status=HTTP_STATUS_BY_CODE[error.code])


def reservation_service() -> ReservationService:
    store = DjangoReservationStore()
    settings = get_engine_settings()
    return ReservationService(
        store,
        snapshots=CachedSnapshotSource(store, timeout=settings.snapshot_cache_timeout),
        settings=settings,
        clock=timezone.localtime,
    )


class DomainAPIView(APIView):
    """APIView that renders domain errors with their stable codes."""

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            return error_response(exc)
        if isinstance(exc, exceptions.ValidationError):
            body = {
                "code": ErrorCode.VALIDATION_ERROR.value,
                "message": "Invalid request",
                "errors": exc.detail,
            }
            return Response(body, status=status.HTTP_400_BAD_REQUEST)
        return super().handle_exception(exc)


class AvailabilityView(DomainAPIView):
    """Handler for POST /api/availability"""

    def post(self, request: Request) -> Response:
        params = AvailabilityRequestSerializer(data=request.data)
        params.is_valid(raise_exception=True)
        data = params.validated_data
        availability = reservation_service().check_availability(
            str(data["category_id"]), data["check_in_at"], data["check_out_at"], units=data["units"]
        )
        return Response(AvailabilitySerializer(availability).data)


class QuoteView(DomainAPIView):
    """Handler for POST /api/quotes"""

    def post(self, request: Request) -> Response:
        params = QuoteRequestSerializer(data=request.data)
        params.is_valid(raise_exception=True)
        data = params.validated_data
        quote = reservation_service().quote_price(
            str(data["category_id"]),
            data["check_in_at"],
            data["check_out_at"],
            addon_ids=[str(addon_id) for addon_id in data["addon_ids"]],
            vip_code=data["vip_code"] or None,
            discount_code=data["discount_code"] or None,
            luggage_count=data["luggage_count"],
        )
        context = {"currency": get_engine_settings().currency}
        return Response(PriceQuoteSerializer(quote, context=context).data)


class ReservationListView(DomainAPIView):
    """Handler for POST /api/reservations"""

    def post(self, request: Request) -> Response:
        params = ReservationCreateSerializer(data=request.data)
        params.is_valid(raise_exception=True)
        data = params.validated_data
        reservation = reservation_service().create_reservation(
            ReservationRequest(
                category_id=str(data["category_id"]),
                check_in_at=data["check_in_at"],
                check_out_at=data["check_out_at"],
                customer=CustomerInfo(
                    driver_name=data["driver_name"],
                    phone=data["phone"],
                    license_plate=data["license_plate"],
                    email=data["email"],
                    passenger_count=data["passenger_count"],
                    luggage_count=data["luggage_count"],
                    flight_number=data["flight_number"],
                    notes=data["notes"],
                ),
                addon_ids=tuple(str(addon_id) for addon_id in data["addon_ids"]),
                vip_code=data["vip_code"] or None,
                discount_code=data["discount_code"] or None,
                manual=data["manual"],
                created_by=data["created_by"],
            )
        )
        return Response(ReservationSerializer(reservation).data, status=status.HTTP_201_CREATED)


class ReservationDetailView(DomainAPIView):
    """Handler for GET /api/reservations/{reservation_id}"""

    def get(self, request: Request, reservation_id: str) -> Response:
        reservation = reservation_service().get_reservation(reservation_id)
        return Response(ReservationSerializer(reservation).data)


class ReservationStatusView(DomainAPIView):
    """Handler for POST /api/reservations/{reservation_id}/status"""

    def post(self, request: Request, reservation_id: str) -> Response:
        params = StatusTransitionSerializer(data=request.data)
        params.is_valid(raise_exception=True)
        reservation = reservation_service().transition_status(
            reservation_id,
            params.validated_data["status"],
            admin_override=params.validated_data["admin_override"],
        )
        return Response(ReservationSerializer(reservation).data)


class OverdueReservationListView(DomainAPIView):
    """Handler for GET /api/reservations/overdue"""

    def get(self, request: Request) -> Response:
        reservations = reservation_service().list_overdue()
        return Response({"results": ReservationSerializer(reservations, many=True).data})


class VIPCodeView(DomainAPIView):
    """Handler for POST /api/vip-codes"""

    def post(self, request: Request) -> Response:
        params = VIPCodeRequestSerializer(data=request.data)
        params.is_valid(raise_exception=True)
        data = params.validated_data
        profile = VIPService(DjangoReservationStore(), settings=get_engine_settings()).issue_vip_code(
            data["phone"],
            data.get("year") or timezone.localdate().year,
            customer_ref=data["customer_ref"],
            discount_pct=data.get("discount_pct"),
        )
        return Response(VIPProfileSerializer(profile).data, status=status.HTTP_201_CREATED)


class CategoryCapacityView(DomainAPIView):
    """Handler for POST /api/categories/{category_id}/capacity"""

    def post(self, request: Request, category_id: str) -> Response:
        params = CapacityChangeSerializer(data=request.data)
        params.is_valid(raise_exception=True)
        category = CategoryService(DjangoReservationStore()).change_capacity(
            category_id, params.validated_data["total_capacity"]
        )
        return Response(ParkingCategorySerializer(category).data)
