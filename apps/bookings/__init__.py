"""Bookings app package.

This app encapsulates the booking domain: server-side pricing of line
items, the booking and payment state machine, booking references and
the periodic completion of past bookings. Writes are conditional updates
on the booking version, so concurrent transitions cannot both succeed.
"""
