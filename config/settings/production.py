"""
Production settings for the E-CARE complaint service.
"""

from .base import *

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = False

ALLOWED_HOSTS = env.list('ALLOWED_HOSTS')

# Security settings for production
SECURE_SSL_REDIRECT = True
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_HSTS_SECONDS = 31536000  # 1 year
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'DENY'

# CORS settings for production
CORS_ALLOWED_ORIGINS = env.list('CORS_ALLOWED_ORIGINS', default=[])
CORS_ALLOW_CREDENTIALS = True

CSRF_TRUSTED_ORIGINS = env.list('CSRF_TRUSTED_ORIGINS', default=[])

# Email configuration for production
EMAIL_BACKEND = 'django.core.mail.backends.smtp.EmailBackend'
EMAIL_HOST = env('EMAIL_HOST', default='smtp.gmail.com')
EMAIL_PORT = env.int('EMAIL_PORT', default=587)
EMAIL_USE_TLS = env.bool('EMAIL_USE_TLS', default=True)
EMAIL_HOST_USER = env('EMAIL_HOST_USER', default='')
EMAIL_HOST_PASSWORD = env('EMAIL_HOST_PASSWORD', default='')
DEFAULT_FROM_EMAIL = env('DEFAULT_FROM_EMAIL', default='noreply@ecare.example.com')

# Adjust logging for production: JSON lines to file, plus a separate error log
LOGGING['formatters']['json'] = JSON_LOG_FORMATTER
LOGGING['handlers']['file']['filename'] = env('LOG_FILE', default='/var/log/ecare/app.log')
LOGGING['handlers']['file']['formatter'] = 'json'
LOGGING['handlers']['error_file'] = {
    'level': 'ERROR',
    'class': 'logging.handlers.RotatingFileHandler',
    'filename': env('ERROR_LOG_FILE', default='/var/log/ecare/error.log'),
    'maxBytes': 1024 * 1024 * 10,  # 10MB
    'backupCount': 5,
    'formatter': 'verbose',
}
LOGGING['loggers']['apps']['handlers'] = ['console', 'file', 'error_file']

# Remove debug_toolbar from installed apps (if somehow included)
INSTALLED_APPS = [app for app in INSTALLED_APPS if app != 'debug_toolbar']
MIDDLEWARE = [mw for mw in MIDDLEWARE if 'debug_toolbar' not in mw]

# Production cache configuration (override defaults to avoid localhost Redis)
# Provide Redis URLs via environment variables:
# - CACHE_DEFAULT_URL (fallback to REDIS_URL)
# - CACHE_SESSIONS_URL (fallback to REDIS_URL)
_CACHE_DEFAULT_URL = env('CACHE_DEFAULT_URL', default=env('REDIS_URL', default='redis://localhost:6379/0'))
_CACHE_SESSIONS_URL = env('CACHE_SESSIONS_URL', default=env('REDIS_URL', default='redis://localhost:6379/0'))

CACHES = {
    'default': {
        'BACKEND': 'django_redis.cache.RedisCache',
        'LOCATION': _CACHE_DEFAULT_URL,
        'OPTIONS': {
            'CLIENT_CLASS': 'django_redis.client.DefaultClient',
        },
        'KEY_PREFIX': 'ecare',
        'TIMEOUT': 300,
        'VERSION': 1,
    },
    'sessions': {
        'BACKEND': 'django_redis.cache.RedisCache',
        'LOCATION': _CACHE_SESSIONS_URL,
        'OPTIONS': {
            'CLIENT_CLASS': 'django_redis.client.DefaultClient',
        },
        'TIMEOUT': 28800,
        'KEY_PREFIX': 'sessions',
    },
}

# Attachment store: any Django storage backend (e.g. S3 via django-storages) can be set here
STORAGES['default']['BACKEND'] = env('ATTACHMENT_STORAGE_BACKEND', default='django.core.files.storage.FileSystemStorage')
