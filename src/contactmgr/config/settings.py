"""
Django settings for the registrant contact manager.

For more information on this file, see
https://docs.djangoproject.com/en/4.2/topics/settings/

For the full list of settings and their values, see
https://docs.djangoproject.com/en/4.2/ref/settings/

IF you'd like to see all of these settings in the running app:

```shell
$ python manage.py shell
>>> from django.conf import settings
>>> dir(settings)
```

"""

import environs
from cfenv import AppEnv  # type: ignore
from pathlib import Path
import json
import logging
import traceback

# # #                          ###
#      Setup code goes here      #
# # #                          ###

env = environs.Env()

# Get secrets from Cloud.gov user provided service, if exists
# If not, get secrets from environment variables
key_service = AppEnv().get_service(name="contactmgr-credentials")

if key_service and key_service.credentials:
    secret = key_service.credentials.get
else:
    secret = env


# # #                          ###
#   Values obtained externally   #
# # #                          ###

path = Path(__file__)

# Build paths inside the project like this: BASE_DIR / "subdir".
# (settings.py is in `src/contactmgr/config/`: BASE_DIR is `src/`)
BASE_DIR = path.resolve().parent.parent.parent

env_db_url = env.dj_db_url("DATABASE_URL", default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}")
env_debug = env.bool("DJANGO_DEBUG", default=False)
env_log_level = env.str("DJANGO_LOG_LEVEL", "INFO")
env_log_format = env.str("DJANGO_LOG_FORMAT", "console")

secret_key = secret("DJANGO_SECRET_KEY", "contactmgr-local-development-key")

# Used for the registrar API
secret_registrar_email = secret("REGISTRAR_EMAIL", None)
secret_registrar_api_key = secret("REGISTRAR_API_KEY", None)
secret_registrar_account_id = secret("REGISTRAR_ACCOUNT_ID", None)
registrar_api_base_url = env.str("REGISTRAR_API_BASE_URL", "https://api.cloudflare.com/client/v4")
registrar_api_timeout = env.float("REGISTRAR_API_TIMEOUT", 30.0)
registrar_request_interval = env.float("REGISTRAR_REQUEST_INTERVAL", 0.1)
registrar_mock_external_apis = env.bool("REGISTRAR_MOCK_EXTERNAL_APIS", default=False)

# region: Basic Django Config-----------------------------------------------###

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = env_debug

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = secret_key

# Applications are modular pieces of code.
# This project has no web surface, so only what the ORM and
# management commands need is installed.
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "contactmgr.apps.ContactMgrConfig",
]

MIDDLEWARE: list[str] = []

# endregion
# region: Database----------------------------------------------------------###

DATABASES = {
    # dj-database-url package takes the supplied Postgres connection string
    # and converts it into a dictionary with the correct USER, HOST, etc
    "default": env_db_url,
}

# Specify default field type to use for primary keys
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# endregion
# region: Registrar API-----------------------------------------------------###

REGISTRAR_EMAIL = secret_registrar_email
REGISTRAR_API_KEY = secret_registrar_api_key
REGISTRAR_ACCOUNT_ID = secret_registrar_account_id
REGISTRAR_API_BASE_URL = registrar_api_base_url
REGISTRAR_API_TIMEOUT = registrar_api_timeout

# Pause between mutating calls during a bulk update, in seconds
REGISTRAR_REQUEST_INTERVAL = registrar_request_interval

# Serve the registrar API from an in-process fake (see mock_registrar_service.py)
REGISTRAR_MOCK_EXTERNAL_APIS = registrar_mock_external_apis

# endregion
# region: Internationalisation----------------------------------------------###

# https://docs.djangoproject.com/en/4.0/topics/i18n/

# Charset to use for HttpResponse objects; used in Content-Type header
DEFAULT_CHARSET = "utf-8"

# provide fallback language if translation file is missing or
# user's locale is not supported - requires USE_I18N = True
LANGUAGE_CODE = "en-us"

# Unused. Prevents Django from emitting a warning.
TIME_ZONE = "UTC"

# make datetimes timezone-aware by default
USE_TZ = True

# setting for phonenumber library
PHONENUMBER_DEFAULT_REGION = "US"

# endregion
# region: Logging-----------------------------------------------------------###

# A Python logging configuration consists of four parts:
#   Loggers
#   Handlers
#   Filters
#   Formatters
# https://docs.djangoproject.com/en/4.1/topics/logging/

# Log a message by doing this:
#
#   import logging
#   logger = logging.getLogger(__name__)
#
# Then:
#
#   logger.debug("We're about to execute function xyz. Wish us luck!")
#   logger.info("Oh! Here's something you might want to know.")
#   logger.warning("Something kinda bad happened.")
#   logger.error("Can't do this important task. Something is very wrong.")
#   logger.critical("Going to crash now.")


class JsonFormatter(logging.Formatter):
    """Formats logs into JSON for better parsing"""

    def __init__(self):
        super().__init__(datefmt="%d/%b/%Y %H:%M:%S")

    def format(self, record):
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "lineno": record.lineno,
            "message": record.getMessage(),
        }
        # Capture exception info if it exists
        if record.exc_info:
            log_record["exception"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(log_record, ensure_ascii=False)


if env_log_format == "json":
    # when logs are shipped somewhere they need to be json so that log levels are parsed correctly
    contactmgr_handlers = ["json"]
else:
    contactmgr_handlers = ["console"]

LOGGING = {
    "version": 1,
    # Don't import Django's existing loggers
    "disable_existing_loggers": True,
    # define how to convert log messages into text;
    # each handler has its choice of format
    "formatters": {
        "verbose": {
            "format": "[%(asctime)s] %(levelname)s [%(name)s:%(lineno)s] %(message)s",
            "datefmt": "%d/%b/%Y %H:%M:%S",
        },
        "json": {
            "()": JsonFormatter,
        },
    },
    # define where log messages will be sent
    # each logger can have one or more handlers
    "handlers": {
        "console": {
            "level": env_log_level,
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
        "json": {
            "level": env_log_level,
            "class": "logging.StreamHandler",
            "formatter": "json",
        },
        # No file logger is configured,
        # because containerized apps
        # do not log to the file system.
    },
    # define loggers: these are "sinks" into which
    # messages are sent for processing
    "loggers": {
        # Django's generic logger
        "django": {
            "handlers": contactmgr_handlers,
            "level": "INFO",
            "propagate": False,
        },
        # Our app!
        "contactmgr": {
            "handlers": contactmgr_handlers,
            "level": "DEBUG",
            "propagate": False,
        },
        # The registrar API transport
        "registrarwrapper": {
            "handlers": contactmgr_handlers,
            "level": "DEBUG",
            "propagate": False,
        },
        # DB info
        "django.db.backends": {
            "handlers": contactmgr_handlers,
            "level": "INFO",
            "propagate": False,
        },
    },
    # root logger catches anything, unless
    # defined by a more specific logger
    "root": {
        "handlers": contactmgr_handlers,
        "level": "INFO",
    },
}

# endregion
