import os

os.environ.setdefault('SECRET_KEY', 'test-secret-key-not-for-production')

from .base import *  # noqa: E402

DEBUG = False

DATABASES = {
    'default': dj_database_url.parse(config('TEST_DATABASE_URL', default='sqlite://:memory:')),
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

AXES_ENABLED = False

RAZORPAY_KEY_ID = 'rzp_test_key'
RAZORPAY_KEY_SECRET = 'test_key_secret'
RAZORPAY_WEBHOOK_SECRET = 'test_webhook_secret'
RAZORPAY_USE_STUB = True

PLATFORM_FEE = 500
TIME_ZONE = 'Asia/Kolkata'

