"""API views for the booking domain."""

from __future__ import annotations

from rest_framework import status  # type: ignore

from apps.bookings.application.command_handlers import CancelBookingCommand, CompleteBookingCommand
from apps.bookings.application.queries import BookingFilters
from apps.bookings.serializers import (
    BookingCancelSerializer,
    BookingCreateSerializer,
    BookingListQuerySerializer,
    BookingSerializer,
    MyBookingsQuerySerializer,
    TicketSerializer,
)
from shared.domain.exceptions import ValidationFailed
from shared.infrastructure.api import paginated, success
from shared.infrastructure.views import TENANT_STRICT, ContextAPIView


class BookingCollectionView(ContextAPIView):
    """POST creates a booking (public); GET lists bookings within the admin scope."""

    def get_tenant_mode(self, request):
        return TENANT_STRICT if request.method == 'POST' else self.tenant_mode

    def post(self, request):
        context = self.request_context(request)
        serializer = BookingCreateSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationFailed(details=serializer.errors)
        booking = self.container.create_booking.handle(context, serializer.to_command())
        return success(
            BookingSerializer(booking).data,
            message="Booking created",
            status_code=status.HTTP_201_CREATED,
        )

    def get(self, request):
        context = self.request_context(request)
        params = self.validated(BookingListQuerySerializer, request.query_params)
        filters = BookingFilters(
            status=params.get('status'),
            search=params['search'].strip(),
            created_from=params.get('created_from'),
            created_to=params.get('created_to'),
        )
        page = self.container.booking_queries.list(context, filters, self.page_request(request))
        return paginated(page, BookingSerializer(page.items, many=True).data)


class MyBookingsView(ContextAPIView):
    tenant_mode = None

    def get(self, request):
        context = self.request_context(request)
        params = self.validated(MyBookingsQuerySerializer, request.query_params)
        page = self.container.booking_queries.my_bookings(
            context, params.get('status'), self.page_request(request, default_limit=10),
        )
        return paginated(page, BookingSerializer(page.items, many=True).data)


class BookingStatsView(ContextAPIView):
    def get(self, request):
        stats = self.container.booking_queries.stats(self.request_context(request))
        return success(stats.to_dict())


class BookingDetailView(ContextAPIView):
    tenant_mode = None

    def get(self, request, booking_id: str):
        booking = self.container.booking_queries.get(self.request_context(request), booking_id)
        return success(BookingSerializer(booking).data)


class BookingByReferenceView(ContextAPIView):
    tenant_mode = None

    def get(self, request, reference: str):
        booking = self.container.booking_queries.get_by_reference(self.request_context(request), reference)
        return success(BookingSerializer(booking).data)


class BookingCancelView(ContextAPIView):
    tenant_mode = None

    def post(self, request, booking_id: str):
        context = self.request_context(request)
        params = self.validated(BookingCancelSerializer, request.data)
        booking = self.container.cancel_booking.handle(
            context, CancelBookingCommand(booking_id=booking_id, reason=params['reason']),
        )
        return success(BookingSerializer(booking).data, message="Booking cancelled")


class BookingCompleteView(ContextAPIView):
    tenant_mode = None

    def post(self, request, booking_id: str):
        booking = self.container.complete_booking.handle(
            self.request_context(request), CompleteBookingCommand(booking_id=booking_id),
        )
        return success(BookingSerializer(booking).data, message="Booking completed")


class BookingTicketView(ContextAPIView):
    tenant_mode = None

    def get(self, request, booking_id: str):
        ticket = self.container.booking_queries.ticket(self.request_context(request), booking_id)
        message = None if ticket.ready else "Ticket is being generated. Please check back shortly."
        return success(TicketSerializer(ticket).data, message=message)
