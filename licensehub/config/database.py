"""Build ``DATABASES['default']`` from ``DB_*`` environment variables"""
from django.core.exceptions import ImproperlyConfigured

POSTGRES_ENGINES = ('postgresql', 'postgres')
SQLITE_ENGINES = ('sqlite', 'sqlite3')


def database_from_env(environ, base_dir):
    engine = environ.get('DB_ENGINE', 'sqlite').strip().lower()

    if engine in POSTGRES_ENGINES:
        return {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': environ.get('DB_NAME', 'licensehub'),
            'USER': environ.get('DB_USER', 'postgres'),
            'PASSWORD': environ.get('DB_PASSWORD', ''),
            'HOST': environ.get('DB_HOST', 'localhost'),
            'PORT': environ.get('DB_PORT', '5432'),
            'CONN_MAX_AGE': 60,
        }
    if engine in SQLITE_ENGINES:
        return {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': environ.get('DB_NAME', str(base_dir / 'db.sqlite3')),
        }
    raise ImproperlyConfigured(
        f"Unsupported DB_ENGINE {engine!r}; use 'postgresql' (or 'postgres') or 'sqlite'"
    )
