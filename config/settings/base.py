"""
Django base settings for deadline_chaser project.
Shared settings between development, production and tests.
"""

from pathlib import Path
from decouple import config, Csv

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = config('SECRET_KEY', default='django-insecure-change-me-in-production')

# Application definition
DJANGO_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
]

THIRD_PARTY_APPS = [
    'django_filters',
    'django_q',
]

LOCAL_APPS = [
    'apps.tasks',
    'apps.reminders',
    'apps.reports',
    'apps.notifications',
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'


# =============================================================================
# INTERNATIONALIZATION & TIMEZONE
# =============================================================================
LANGUAGE_CODE = 'en-us'

# The calendar day used for duplicate reminder suppression is computed in
# this zone, so every worker must share it.
TIME_ZONE = config('TIME_ZONE', default='UTC')

USE_I18N = True

USE_TZ = True

DATE_FORMAT = 'j M Y'
DATETIME_FORMAT = 'j M Y, g:i A'


# =============================================================================
# STATIC FILES
# =============================================================================
STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# =============================================================================
# EMAIL SETTINGS
# =============================================================================
EMAIL_BACKEND = config(
    'EMAIL_BACKEND',
    default='django.core.mail.backends.console.EmailBackend'
)
EMAIL_HOST = config('EMAIL_HOST', default='localhost')
EMAIL_PORT = config('EMAIL_PORT', default=587, cast=int)
EMAIL_USE_TLS = config('EMAIL_USE_TLS', default=True, cast=bool)
EMAIL_HOST_USER = config('EMAIL_HOST_USER', default='')
EMAIL_HOST_PASSWORD = config('EMAIL_HOST_PASSWORD', default='')
EMAIL_TIMEOUT = config('EMAIL_TIMEOUT', default=10, cast=int)

DEFAULT_FROM_EMAIL = config('DEFAULT_FROM_EMAIL', default='noreply@deadline-chaser.local')


# =============================================================================
# REMINDER DELIVERY
# =============================================================================
# Dotted path to the DeliveryChannel implementation used by the scheduler.
REMINDER_DELIVERY_CHANNEL = config(
    'REMINDER_DELIVERY_CHANNEL',
    default='apps.notifications.services.WebhookDeliveryChannel'
)

# Empty webhook URLs put the matching transport in demo mode (no-op success).
REMINDER_EMAIL_WEBHOOK_URL = config('REMINDER_EMAIL_WEBHOOK_URL', default='')
REMINDER_CHAT_WEBHOOK_URL = config('REMINDER_CHAT_WEBHOOK_URL', default='')
ESCALATION_WEBHOOK_URL = config('ESCALATION_WEBHOOK_URL', default='')

ESCALATION_EMAIL = config('ESCALATION_EMAIL', default='manager@example.com')

# Seconds before a hung delivery call is treated as a failure
DELIVERY_TIMEOUT_SECONDS = config('DELIVERY_TIMEOUT_SECONDS', default=10, cast=int)

# Single-flight lock around an evaluation cycle
REMINDER_CYCLE_LOCK_TIMEOUT = config('REMINDER_CYCLE_LOCK_TIMEOUT', default=3600, cast=int)

# Cron expression for the daily reminder check schedule
REMINDER_CHECK_CRON = config('REMINDER_CHECK_CRON', default='0 9 * * *')


# =============================================================================
# DJANGO-Q2 SETTINGS (Background Tasks)
# =============================================================================
Q_CLUSTER = {
    'name': 'deadline_chaser',
    'workers': 2,
    'recycle': 500,
    'timeout': 600,
    'retry': 900,
    'compress': True,
    'save_limit': 250,
    'queue_limit': 500,
    'cpu_affinity': 1,
    'label': 'Django Q2',
    'orm': 'default',
}


# =============================================================================
# DEFAULT PRIMARY KEY FIELD TYPE
# =============================================================================
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
