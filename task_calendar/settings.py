"""
Django settings for task_calendar project.
The planning API is stateless; the database is only here for Django itself.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'dev-secret-key-change-in-production')

DEBUG = os.environ.get('DEBUG', 'True').lower() == 'true'

ALLOWED_HOSTS = ['*']

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'rest_framework',
    'planning',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'task_calendar.urls'

WSGI_APPLICATION = 'task_calendar.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.environ.get('TIME_ZONE', 'UTC')
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'DEFAULT_RENDERER_CLASSES': ['rest_framework.renderers.JSONRenderer'],
    'DEFAULT_PARSER_CLASSES': ['rest_framework.parsers.JSONParser'],
    'UNAUTHENTICATED_USER': None,
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '{asctime} {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'planning': {
            'handlers': ['console'],
            'level': os.environ.get('PLANNING_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}

# Scheduling Configuration
SCHEDULING = {
    'BUSY_FLEX_MAX_MINUTES': int(os.environ.get('BUSY_FLEX_MAX_MINUTES', 15)),
    'BUSY_FLEX_MAX_HANDS_LEVEL': int(os.environ.get('BUSY_FLEX_MAX_HANDS_LEVEL', 1)),
    'BUSY_FLEX_MAX_EYES_LEVEL': int(os.environ.get('BUSY_FLEX_MAX_EYES_LEVEL', 1)),
    'BUSY_FLEX_MAX_DEVICE_LEVEL': int(os.environ.get('BUSY_FLEX_MAX_DEVICE_LEVEL', 1)),
    'TASK_DEFAULT_DURATION_MINUTES': int(os.environ.get('TASK_DEFAULT_DURATION_MINUTES', 30)),
    'MAX_SUGGESTIONS_PER_TASK': int(os.environ.get('MAX_SUGGESTIONS_PER_TASK', 5)),
    'GAP_POLICY': os.environ.get('SCHEDULING_GAP_POLICY', 'omit'),
    'MAX_RANGE_DAYS': int(os.environ.get('SCHEDULING_MAX_RANGE_DAYS', 366)),
}
