"""
Pricing Engine

Recomputes every monetary field of a booking from the attraction's
authoritative pricing options. Client-submitted names and prices are
accepted as input shape only and are never copied into the result.

Pure functions of their inputs: no I/O, no store access.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence, Tuple

from apps.attractions.domain.entities import Attraction
from apps.bookings.domain.entities import LineItem, Quantities
from shared.domain.exceptions import UnknownPricingOption
from shared.domain.value_objects import Money

SERVICE_FEE_RATE = Decimal('0.05')


@dataclass(frozen=True)
class RequestedItem:
    """
    A line item as the client submitted it

    option_name, unit_price and total_price are cosmetic input; only
    option_id, date, time and quantities feed the computation.
    """
    option_id: str
    date: str
    quantities: Quantities
    time: str | None = None
    option_name: str | None = None
    unit_price: Decimal | None = None
    total_price: Decimal | None = None


@dataclass(frozen=True)
class PricedBooking:
    items: Tuple[LineItem, ...]
    subtotal: Money
    fees: Money
    discount: Money
    total: Money

    @property
    def currency(self) -> str:
        return self.total.currency


class PricingEngine:
    """
    Flat per-head pricing with a service fee

    totalPrice = unitPrice x (adults + children + infants)
    subtotal   = sum of line totals, exact
    fees       = subtotal x fee_rate, rounded half-up to the minor unit
    total      = subtotal + fees - discount
    """

    def __init__(self, fee_rate: Decimal = SERVICE_FEE_RATE):
        self.fee_rate = Decimal(str(fee_rate))

    def price_booking(self, attraction: Attraction, requested_items: Sequence[RequestedItem]) -> PricedBooking:
        """
        Price a booking request against the attraction catalog

        Raises:
            UnknownPricingOption: if any line references an option id the
                attraction does not offer; the whole request is rejected
        """
        items = tuple(self.price_item(attraction, requested) for requested in requested_items)
        return self.totals(items, attraction.currency)

    def price_item(self, attraction: Attraction, requested: RequestedItem) -> LineItem:
        option = attraction.option(requested.option_id)
        if option is None:
            raise UnknownPricingOption(requested.option_id)

        return LineItem(
            option_id=option.id,
            option_name=option.name,
            date=requested.date,
            time=requested.time,
            quantities=requested.quantities,
            unit_price=option.price,
            total_price=option.price * requested.quantities.total_guests,
        )

    def totals(self, items: Iterable[LineItem], currency: str, discount: Decimal = Decimal('0')) -> PricedBooking:
        """
        Apply the fee formula to already priced lines

        Also used to re-derive the totals of a persisted booking.
        """
        items = tuple(items)
        subtotal = Money.zero(currency)
        for item in items:
            subtotal = subtotal + Money(item.total_price, currency)
        subtotal = subtotal.quantize()

        fees = (subtotal * self.fee_rate).quantize()
        discount = Money(discount, currency).quantize()
        total = (subtotal + fees - discount).quantize()

        return PricedBooking(items=items, subtotal=subtotal, fees=fees, discount=discount, total=total)


default_engine = PricingEngine()


def price_booking(attraction: Attraction, requested_items: Sequence[RequestedItem]) -> PricedBooking:
    return default_engine.price_booking(attraction, requested_items)
