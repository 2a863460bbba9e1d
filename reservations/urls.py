from django.urls import path

from reservations.handlers import (
    AvailabilityView,
    CategoryCapacityView,
    OverdueReservationListView,
    QuoteView,
    ReservationDetailView,
    ReservationListView,
    ReservationStatusView,
    VIPCodeView,
)

urlpatterns = [
    path("availability", AvailabilityView.as_view(), name="availability"),
    path("quotes", QuoteView.as_view(), name="quote"),
    path("reservations", ReservationListView.as_view(), name="reservation-list"),
    path(
        "reservations/overdue",
        OverdueReservationListView.as_view(),
        name="reservation-overdue",
    ),
    path(
        "reservations/<str:reservation_id>",
        ReservationDetailView.as_view(),
        name="reservation-detail",
    ),
    path(
        "reservations/<str:reservation_id>/status",
        ReservationStatusView.as_view(),
        name="reservation-status",
    ),
    path("vip-codes", VIPCodeView.as_view(), name="vip-code"),
    path(
        "categories/<str:category_id>/capacity",
        CategoryCapacityView.as_view(),
        name="category-capacity",
    ),
]
