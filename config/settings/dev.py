"""Development settings for the attractions marketplace.

This module extends the base settings with development specific
configuration, such as enabling debug, allowing all hosts, using the
console email backend and the simulated payment gateway. Do not use these
settings in production!
"""

from .base import *  # noqa: F401,F403

# Enable debug mode for development
DEBUG = True

# Allow all hosts in development
ALLOWED_HOSTS = ['*']

# Use console email backend during development
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# Stripe only when explicitly requested
PAYMENTS_GATEWAY = os.environ.get('PAYMENTS_GATEWAY', 'simulated')  # noqa: F405

# Render tickets inline unless a worker is running
NOTIFICATIONS_ASYNC = os.environ.get('NOTIFICATIONS_ASYNC', 'false').lower() == 'true'  # noqa: F405
