"""Tests for server-side booking pricing."""

from __future__ import annotations

from decimal import Decimal

from django.test import SimpleTestCase

from apps.attractions.domain.entities import Attraction, AttractionStatus, PricingOption
from apps.bookings.domain.pricing import PricingEngine, price_booking
from shared.domain.exceptions import UnknownPricingOption
from shared.testing import requested


def attraction(*options: PricingOption, currency: str = 'EUR') -> Attraction:
    return Attraction(
        title='City Walk',
        currency=currency,
        tenant_ids=['tenant-1'],
        pricing_options=list(options),
        status=AttractionStatus.ACTIVE,
    )


ADULT = PricingOption(id='adult-option', name='Adult Ticket', price=Decimal('50'))


class PriceBookingTests(SimpleTestCase):
    def test_tampered_line_is_repriced_from_the_catalog(self) -> None:
        priced = price_booking(attraction(ADULT), [
            requested(
                'adult-option', adults=2, children=1,
                option_name='Tampered Name', unit_price=Decimal('0.01'), total_price=Decimal('0.03'),
            ),
        ])

        item = priced.items[0]
        self.assertEqual(item.option_name, 'Adult Ticket')
        self.assertEqual(item.unit_price, Decimal('50'))
        self.assertEqual(item.total_price, Decimal('150'))
        self.assertEqual(priced.subtotal.amount, Decimal('150.00'))
        self.assertEqual(priced.fees.amount, Decimal('7.50'))
        self.assertEqual(priced.discount.amount, Decimal('0.00'))
        self.assertEqual(priced.total.amount, Decimal('157.50'))

    def test_infants_are_priced_per_head(self) -> None:
        priced = price_booking(attraction(ADULT), [requested('adult-option', adults=1, infants=2)])
        self.assertEqual(priced.items[0].total_price, Decimal('150'))

    def test_currency_comes_from_the_attraction(self) -> None:
        priced = price_booking(attraction(ADULT, currency='gbp'), [requested('adult-option')])
        self.assertEqual(priced.currency, 'GBP')

    def test_unknown_option_rejects_the_whole_request(self) -> None:
        with self.assertRaises(UnknownPricingOption) as caught:
            price_booking(attraction(ADULT), [
                requested('adult-option'),
                requested('child-option'),
            ])
        self.assertEqual(caught.exception.option_id, 'child-option')
        self.assertEqual(caught.exception.message, 'Invalid pricing option selected')

    def test_option_lookup_is_exact(self) -> None:
        with self.assertRaises(UnknownPricingOption):
            price_booking(attraction(ADULT), [requested('ADULT-OPTION')])

    def test_fees_round_half_up_to_the_cent(self) -> None:
        option = PricingOption(id='o', name='Odd', price=Decimal('0.10'))
        # 0.10 x 5% = 0.005 -> 0.01
        priced = price_booking(attraction(option), [requested('o')])
        self.assertEqual(priced.fees.amount, Decimal('0.01'))
        self.assertEqual(priced.total.amount, Decimal('0.11'))

    def test_many_lines_do_not_accumulate_float_error(self) -> None:
        option = PricingOption(id='o', name='Dime', price=Decimal('0.10'))
        priced = price_booking(attraction(option), [requested('o') for _ in range(1000)])
        self.assertEqual(priced.subtotal.amount, Decimal('100.00'))
        self.assertEqual(priced.fees.amount, Decimal('5.00'))
        self.assertEqual(priced.total.amount, Decimal('105.00'))

    def test_total_identity_holds_across_mixed_lines(self) -> None:
        options = [
            PricingOption(id='a', name='A', price=Decimal('19.99')),
            PricingOption(id='b', name='B', price=Decimal('7.33')),
        ]
        priced = price_booking(attraction(*options), [
            requested('a', adults=3, children=2),
            requested('b', adults=1, infants=4, date='2030-06-02'),
        ])
        expected_subtotal = Decimal('19.99') * 5 + Decimal('7.33') * 5
        self.assertEqual(priced.subtotal.amount, expected_subtotal)
        self.assertEqual(priced.total.amount, priced.subtotal.amount + priced.fees.amount - priced.discount.amount)

    def test_custom_fee_rate(self) -> None:
        priced = PricingEngine(Decimal('0.10')).price_booking(attraction(ADULT), [requested('adult-option')])
        self.assertEqual(priced.fees.amount, Decimal('5.00'))

    def test_totals_recomputed_from_items_match(self) -> None:
        engine = PricingEngine()
        priced = engine.price_booking(attraction(ADULT), [requested('adult-option', adults=3)])
        again = engine.totals(priced.items, priced.currency, priced.discount.amount)
        self.assertEqual(again, priced)
