"""Local development settings."""
from .base import *  # noqa: F401, F403

DEBUG = True

# Office console dev server
CORS_ALLOW_ALL_ORIGINS = True
CSRF_TRUSTED_ORIGINS = ["http://localhost:3000"]

INSTALLED_APPS += ["django_extensions"]  # noqa: F405

# Invoice emails go to the terminal
EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

# Lets `curl -H "Authorization: Bearer local-cron"` hit the cron trigger
CRON_SECRET = env("CRON_SECRET", default="local-cron")  # noqa: F405
