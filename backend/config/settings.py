"""
Django settings for the Golden Glass storefront backend.

Configuration is read from environment variables (a .env file at the
repository root is loaded first).
"""
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent.parent

load_dotenv(BASE_DIR / '.env')

SECRET_KEY = os.getenv('SECRET_KEY', 'django-insecure-goldenglass-dev-key')

DEBUG = os.getenv('DEBUG', 'true').lower() == 'true'

ALLOWED_HOSTS = [h.strip() for h in os.getenv('ALLOWED_HOSTS', '*').split(',') if h.strip()]

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'django.contrib.staticfiles',
    'rest_framework',
    'backend.core',
    'backend.catalog',
    'backend.pricing',
    'backend.content',
    'backend.orders',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'backend.config.urls'

WSGI_APPLICATION = 'backend.config.wsgi.application'

# Buckets live in the cache; the database only backs Django's own apps.
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'Europe/Istanbul'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
    ],
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'UNAUTHENTICATED_USER': None,
}

# Cache configuration
# "default" is the remote key-value store behind /api/data.
# "local" mirrors every saved bucket on disk (the local storage fallback).
REDIS_URL = os.getenv('REDIS_URL', '')
LOCAL_STORAGE_DIR = os.getenv('LOCAL_STORAGE_DIR', str(BASE_DIR / '.local_storage'))

if REDIS_URL:
    _default_cache = {
        'BACKEND': 'django_redis.cache.RedisCache',
        'LOCATION': REDIS_URL,
        'OPTIONS': {
            'CLIENT_CLASS': 'django_redis.client.DefaultClient',
            'SOCKET_CONNECT_TIMEOUT': 5,
            'SOCKET_TIMEOUT': 5,
        },
        'TIMEOUT': None,
    }
else:
    _default_cache = {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'goldenglass-kv',
        'TIMEOUT': None,
    }

CACHES = {
    'default': _default_cache,
    'local': {
        'BACKEND': 'django.core.cache.backends.filebased.FileBasedCache',
        'LOCATION': LOCAL_STORAGE_DIR,
        'TIMEOUT': None,
    },
}

# Persistence facade
DATA_API_URL = os.getenv('DATA_API_URL', 'http://127.0.0.1:8000/api/data')
DATA_API_TIMEOUT = float(os.getenv('DATA_API_TIMEOUT', '5'))

# Admin panel gate
ADMIN_SESSION_TTL_HOURS = int(os.getenv('ADMIN_SESSION_TTL_HOURS', '24'))

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
    },
}
