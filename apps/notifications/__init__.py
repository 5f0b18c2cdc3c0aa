"""Notifications app package.

Delivers booking confirmations, password resets and invitations by e-mail,
and renders the PDF e-ticket attached to a booking confirmation. Delivery
runs inline or through Celery tasks.
"""
