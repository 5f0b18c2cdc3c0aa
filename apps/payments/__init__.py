"""Payments app package.

Payment intents, confirmation, provider webhooks and refunds. The payment
provider sits behind the PaymentGateway interface; Stripe in production,
a simulated gateway in development and tests.
"""
