"""
Performance settings for the complaint service.
Cache, session and Celery tuning; base.py reads these.
"""

# Cache Configuration (Redis-based)
CACHE_PERFORMANCE = {
    'default': {
        'BACKEND': 'django_redis.cache.RedisCache',
        'LOCATION': 'redis://localhost:6379/0',
        'OPTIONS': {
            'CLIENT_CLASS': 'django_redis.client.DefaultClient',
            'CONNECTION_POOL_KWARGS': {
                'max_connections': 50,
                'retry_on_timeout': True,
            },
            'COMPRESSOR': 'django_redis.compressors.zlib.ZlibCompressor',
            'SERIALIZER': 'django_redis.serializers.json.JSONSerializer',
        },
        'KEY_PREFIX': 'ecare',
        'TIMEOUT': 300,  # 5 minutes default
        'VERSION': 1,
    },
    'sessions': {
        'BACKEND': 'django_redis.cache.RedisCache',
        'LOCATION': 'redis://localhost:6379/1',
        'OPTIONS': {
            'CLIENT_CLASS': 'django_redis.client.DefaultClient',
        },
        'TIMEOUT': 28800,  # 8 hours
        'KEY_PREFIX': 'sessions',
    },
}

# Session Performance
SESSION_ENGINE = 'django.contrib.sessions.backends.cache'
SESSION_CACHE_ALIAS = 'sessions'

# Static Files Performance
WHITENOISE_USE_FINDERS = True
WHITENOISE_AUTOREFRESH = True

# Celery Performance
CELERY_PERFORMANCE = {
    'broker_connection_retry_on_startup': True,
    'task_acks_late': True,
    'worker_prefetch_multiplier': 1,
    'task_compression': 'gzip',
    'result_compression': 'gzip',
    'task_routes': {
        'apps.complaints.tasks.refresh_dashboard_metrics': {'queue': 'metrics'},
    },
    'worker_concurrency': 4,
    'task_time_limit': 1800,  # 30 minutes
    'task_soft_time_limit': 1500,  # 25 minutes
}

# Pagination Performance
PAGINATION_SETTINGS = {
    'DEFAULT_PAGE_SIZE': 25,
    'MAX_PAGE_SIZE': 100,
    'PAGE_SIZE_QUERY_PARAM': 'page_size',
}

# File Upload Performance
FILE_UPLOAD_HANDLERS = [
    'django.core.files.uploadhandler.MemoryFileUploadHandler',
    'django.core.files.uploadhandler.TemporaryFileUploadHandler',
]

# Structured log formatter used by production file handlers
JSON_LOG_FORMATTER = {
    '()': 'pythonjsonlogger.jsonlogger.JsonFormatter',
    'format': '%(asctime)s %(name)s %(levelname)s %(message)s'
}
