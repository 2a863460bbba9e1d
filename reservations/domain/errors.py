"""Domain error codes for the reservations module."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reservations.domain.models import MaintenanceWindow


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_ID = "INVALID_ID"
    CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"
    CATEGORY_INACTIVE = "CATEGORY_INACTIVE"
    RESERVATION_NOT_FOUND = "RESERVATION_NOT_FOUND"
    MAINTENANCE_CONFLICT = "MAINTENANCE_CONFLICT"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    INVALID_DISCOUNT_CODE = "INVALID_DISCOUNT_CODE"
    INVALID_VIP_CODE = "INVALID_VIP_CODE"
    PRICING_CONFIGURATION = "PRICING_CONFIGURATION"
    IDENTITY_COLLISION = "IDENTITY_COLLISION"
    VIP_CODE_COLLISION = "VIP_CODE_COLLISION"
    INVALID_TRANSITION = "INVALID_TRANSITION"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised for malformed intervals and missing or invalid fields."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(code=ErrorCode.VALIDATION_ERROR, message=message)
        self.field = field


class InvalidIdentifierError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, kind: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {kind} ID format",
        )
        self.kind = kind


class CategoryNotFoundError(DomainError):
    """Raised when a parking category does not exist."""

    def __init__(self, category_id: str) -> None:
        super().__init__(
            code=ErrorCode.CATEGORY_NOT_FOUND,
            message="Parking category not found",
        )
        self.category_id = category_id


class CategoryInactiveError(DomainError):
    """Raised when a parking category exists but is not bookable."""

    def __init__(self, category_id: str) -> None:
        super().__init__(
            code=ErrorCode.CATEGORY_INACTIVE,
            message="Parking category is not available for booking",
        )
        self.category_id = category_id


class ReservationNotFoundError(DomainError):
    """Raised when a reservation does not exist."""

    def __init__(self, reservation_id: str) -> None:
        super().__init__(
            code=ErrorCode.RESERVATION_NOT_FOUND,
            message="Reservation not found",
        )
        self.reservation_id = reservation_id


class MaintenanceConflictError(DomainError):
    """Raised when the requested interval hits a maintenance window."""

    def __init__(self, windows: "tuple[MaintenanceWindow, ...]") -> None:
        reasons = ", ".join(window.reason for window in windows)
        super().__init__(
            code=ErrorCode.MAINTENANCE_CONFLICT,
            message=f"Parking is closed for maintenance: {reasons}",
        )
        self.windows = windows


class CapacityError(DomainError):
    """Raised when not enough spaces remain for the requested interval."""

    def __init__(
        self,
        requested: int,
        available: int,
        message: str = "No parking space available for the requested time",
    ) -> None:
        super().__init__(code=ErrorCode.CAPACITY_EXCEEDED, message=message)
        self.requested = requested
        self.available = available


class InvalidDiscountCodeError(DomainError):
    """Raised when a promotional code cannot be applied.

    ``reason`` is one of: ``not_found``, ``inactive``, ``not_started``,
    ``expired``, ``exhausted``, ``not_applicable``, ``below_minimum``.
    """

    def __init__(self, code: str, reason: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_DISCOUNT_CODE,
            message=f"Discount code cannot be applied ({reason})",
        )
        self.discount_code = code
        self.reason = reason


class InvalidVIPCodeError(DomainError):
    """Raised when a VIP code does not match any profile."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_VIP_CODE,
            message="VIP code not recognised",
        )


class PricingConfigurationError(DomainError):
    """Raised when configured prices cannot produce a valid total.

    The detail is for logs only; the message stays generic.
    """

    def __init__(self, detail: str) -> None:
        super().__init__(
            code=ErrorCode.PRICING_CONFIGURATION,
            message="Unable to price this reservation",
        )
        self.detail = detail


class IdentityCollisionError(DomainError):
    """Raised when every booking reference candidate is already taken."""

    def __init__(self, base_reference: str, attempts: int) -> None:
        super().__init__(
            code=ErrorCode.IDENTITY_COLLISION,
            message="Could not allocate a booking reference",
        )
        self.base_reference = base_reference
        self.attempts = attempts


class VIPCodeCollisionError(DomainError):
    """Raised when a derived VIP code is already held by another profile."""

    def __init__(self, vip_code: str) -> None:
        super().__init__(
            code=ErrorCode.VIP_CODE_COLLISION,
            message="VIP code already issued",
        )
        self.vip_code = vip_code


class InvalidTransitionError(DomainError):
    """Raised for a status change the reservation lifecycle does not allow."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message=f"Cannot move reservation from {current} to {target}",
        )
        self.current = current
        self.target = target
