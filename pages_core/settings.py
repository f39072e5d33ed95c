import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv()


def env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def env_float(name, default=None):
    value = os.getenv(name)
    if not value:
        return default
    return float(value)


SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'pages-publisher-insecure-dev-key')
DEBUG = env_bool('DJANGO_DEBUG')
ALLOWED_HOSTS = os.getenv('DJANGO_ALLOWED_HOSTS', '*').split(',')

INSTALLED_APPS = [
    'publisher_app.apps.PublisherAppConfig',
]

MIDDLEWARE = [
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'pages_core.urls'
ASGI_APPLICATION = 'pages_core.asgi.application'

# nothing is persisted
DATABASES = {}

USE_TZ = True

PORT = int(os.getenv('PORT', '3000'))

GITHUB_TOKEN = os.getenv('GITHUB_TOKEN', '')
GITHUB_API_URL = os.getenv('GITHUB_API_URL', 'https://api.github.com')
GITHUB_USER_AGENT = os.getenv('GITHUB_USER_AGENT', 'pages-publisher')
GITHUB_TIMEOUT = env_float('GITHUB_TIMEOUT')

PAGES_WORKSPACE_ROOT = Path(os.getenv('PAGES_WORKSPACE_ROOT', os.getcwd()))
PAGES_TARGET_BRANCH = os.getenv('PAGES_TARGET_BRANCH', 'gh-pages')
PAGES_BUILD_COMMAND = os.getenv('PAGES_BUILD_COMMAND', 'harp compile {source} {output}')
PAGES_COMMIT_MESSAGE = os.getenv('PAGES_COMMIT_MESSAGE', 'Automated commit by pages-publisher')
PAGES_CLEANUP_ON_FAILURE = env_bool('PAGES_CLEANUP_ON_FAILURE')
PAGES_SERIALIZE_PUBLISHES = env_bool('PAGES_SERIALIZE_PUBLISHES', True)

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'plain': {
            'format': '%(asctime)s %(levelname)s %(name)s %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'plain',
        },
    },
    'loggers': {
        'publisher_app': {
            'handlers': ['console'],
            'level': os.getenv('LOG_LEVEL', 'INFO').upper(),
        },
    },
}
