from .base import *  # noqa: F403
from .base import env

# GENERAL
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#debug
DEBUG = True
# https://docs.djangoproject.com/en/dev/ref/settings/#secret-key
SECRET_KEY = env(
    "DJANGO_SECRET_KEY",
    default="x5kTqZ0qkV3mE3oKq0rI0vQ2gqQ5S9yZb6d1D2mW8c7N4fH1uJ0aPzR3sL6tY9eB",
)
# https://docs.djangoproject.com/en/dev/ref/settings/#allowed-hosts
ALLOWED_HOSTS = ["localhost", "0.0.0.0", "127.0.0.1"]  # noqa: S104

LOGGING["loggers"]["turbo_push"]["level"] = "DEBUG"  # noqa: F405
