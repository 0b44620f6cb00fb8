"""
Django settings for the licensehub project.

Every deployment-specific value is read from the environment so the same
module serves local development, CI and production.
"""
import os
from datetime import timedelta
from pathlib import Path

from licensehub.config.database import database_from_env

BASE_DIR = Path(__file__).resolve().parent.parent.parent


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


SECRET_KEY = os.environ.get('SECRET_KEY', 'django-insecure-licensehub-development-key')

DEBUG = env_bool('DEBUG', False)

ALLOWED_HOSTS = [h.strip() for h in os.environ.get('ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',') if h.strip()]


INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'django_filters',
    'licensehub.core',
    'licensehub.licenses',
    'licensehub.procurement',
    'licensehub.notifications',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'licensehub.config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'licensehub.config.wsgi.application'


# Database (DB_ENGINE: postgresql | postgres | sqlite)
DATABASES = {
    'default': database_from_env(os.environ, BASE_DIR),
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

AUTH_USER_MODEL = 'core.User'

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator', 'OPTIONS': {'min_length': 6}},
]


# Cache: Redis when configured, process-local memory otherwise
REDIS_URL = os.environ.get('REDIS_URL')

if REDIS_URL:
    CACHES = {
        'default': {
            'BACKEND': 'django_redis.cache.RedisCache',
            'LOCATION': REDIS_URL,
            'OPTIONS': {
                'CLIENT_CLASS': 'django_redis.client.DefaultClient',
                'IGNORE_EXCEPTIONS': True,
            },
            'KEY_PREFIX': 'licensehub',
        }
    }
else:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'licensehub',
        }
    }


# Internationalization
LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.environ.get('TIME_ZONE', 'UTC')
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# REST framework
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'rest_framework_simplejwt.authentication.JWTAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.IsAuthenticated',
    ),
    'DEFAULT_FILTER_BACKENDS': (
        'django_filters.rest_framework.DjangoFilterBackend',
    ),
    'EXCEPTION_HANDLER': 'licensehub.core.exceptions.api_exception_handler',
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=int(os.environ.get('JWT_ACCESS_MINUTES', '60'))),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=int(os.environ.get('JWT_REFRESH_DAYS', '7'))),
    'AUTH_HEADER_TYPES': ('Bearer',),
    'USER_ID_FIELD': 'id',
    'USER_ID_CLAIM': 'user_id',
}


# Project settings
LOG_DIR = Path(os.environ.get('LOG_DIR', str(BASE_DIR / 'logs')))
LOG_DIR.mkdir(parents=True, exist_ok=True)

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

LICENSEHUB = {
    'DEFAULT_PAGE_LIMIT': 5,
    'MAX_PAGE_LIMIT': 100,
    'LICENSE_PAGE_SIZE': 10,
    'DIRECTORY_RESULT_LIMIT': 20,
    'AUDIT_RESULT_LIMIT': 100,
    'LICENSE_AUDIT_LOG': LOG_DIR / 'licenseAudit.log',
    'LICENSE_EXPIRY_WARNING_DAYS': int(os.environ.get('LICENSE_EXPIRY_WARNING_DAYS', '3')),
    'CACHE_TTL': 120,
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
        'audit_json': {
            '()': 'licensehub.core.log_formatters.JsonLineFormatter',
            'service': 'license-management',
        },
        'cron': {
            'format': '[{asctime}] {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
        'license_audit_file': {
            'class': 'logging.FileHandler',
            'filename': str(LICENSEHUB['LICENSE_AUDIT_LOG']),
            'formatter': 'audit_json',
            'encoding': 'utf-8',
            'delay': True,
        },
        'license_cron_file': {
            'class': 'logging.FileHandler',
            'filename': str(LOG_DIR / 'license-cron.log'),
            'formatter': 'cron',
            'encoding': 'utf-8',
            'delay': True,
        },
    },
    'loggers': {
        'licensehub': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
        'licensehub.license_audit': {
            'handlers': ['license_audit_file', 'console'],
            'level': 'INFO',
            'propagate': False,
        },
        'licensehub.license_cron': {
            'handlers': ['license_cron_file', 'console'],
            'level': 'INFO',
            'propagate': False,
        },
    },
}
