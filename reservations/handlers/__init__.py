from reservations.handlers.views import (
    AvailabilityView,
    CategoryCapacityView,
    OverdueReservationListView,
    QuoteView,
    ReservationDetailView,
    ReservationListView,
    ReservationStatusView,
    VIPCodeView,
)

__all__ = [
    "AvailabilityView",
    "CategoryCapacityView",
    "OverdueReservationListView",
    "QuoteView",
    "ReservationDetailView",
    "ReservationListView",
    "ReservationStatusView",
    "VIPCodeView",
]
