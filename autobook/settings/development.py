from .base import *

DEBUG = True

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# Relax axes in dev
AXES_ENABLED = False

# No Razorpay keys locally: use predictable stub orders
RAZORPAY_USE_STUB = config('RAZORPAY_USE_STUB', default=True, cast=bool)

