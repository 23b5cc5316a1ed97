"""
Django development settings for deadline_chaser project.

Reminders are rendered and logged locally: emails go to the console and
webhook URLs default to empty, so every delivery runs in demo mode.
"""

from .base import *

DEBUG = True

ALLOWED_HOSTS = ['localhost', '127.0.0.1', '0.0.0.0']


# =============================================================================
# DATABASE
# =============================================================================
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}


# =============================================================================
# DEBUG TOOLBAR
# =============================================================================
# New lists; base.INSTALLED_APPS and base.MIDDLEWARE stay untouched
INSTALLED_APPS = INSTALLED_APPS + ['debug_toolbar']

MIDDLEWARE = ['debug_toolbar.middleware.DebugToolbarMiddleware'] + MIDDLEWARE

INTERNAL_IPS = ['127.0.0.1']


# =============================================================================
# CACHE (cycle lock)
# =============================================================================
# Shared by runserver and qcluster. Requires: python manage.py createcachetable
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.db.DatabaseCache',
        'LOCATION': 'deadline_chaser_cache',
    }
}


# =============================================================================
# REMINDER DELIVERY
# =============================================================================
# Switch to EmailDeliveryChannel to see rendered reminders as console emails
REMINDER_DELIVERY_CHANNEL = config(
    'REMINDER_DELIVERY_CHANNEL',
    default='apps.notifications.services.WebhookDeliveryChannel',
)
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# Short lock so an interrupted `run_reminder_cycle` does not block the next try
REMINDER_CYCLE_LOCK_TIMEOUT = config('REMINDER_CYCLE_LOCK_TIMEOUT', default=300, cast=int)

Q_CLUSTER = {
    **Q_CLUSTER,
    'name': 'deadline_chaser_dev',
    'workers': 1,
}


# =============================================================================
# LOGGING
# =============================================================================
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'reminders': {
            'format': '{asctime} {levelname} [{name}] {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'reminders',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'apps.notifications': {
            'handlers': ['console'],
            'level': 'DEBUG',
            'propagate': False,
        },
        'apps.tasks': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'django_q': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
    },
}
