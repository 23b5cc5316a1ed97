"""
Django settings used by the pytest suite.
"""

from .base import *

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'deadline-chaser-tests',
    }
}

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

TIME_ZONE = 'UTC'

# Keep every transport in demo mode unless a test opts in
REMINDER_DELIVERY_CHANNEL = 'apps.notifications.services.WebhookDeliveryChannel'
REMINDER_EMAIL_WEBHOOK_URL = ''
REMINDER_CHAT_WEBHOOK_URL = ''
ESCALATION_WEBHOOK_URL = ''

Q_CLUSTER = {
    'name': 'deadline_chaser_tests',
    'orm': 'default',
    'sync': True,
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'WARNING',
    },
}
