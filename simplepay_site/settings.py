from pathlib import Path
import os
from dotenv import load_dotenv
from decouple import config as _decouple_config

# ───────────── BASE / ENV ─────────────
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")


# ───────────── env helpers ─────────────
def _to_bool(v, default=False):
    if v is None:
        return default
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    return s in ("1", "true", "t", "yes", "y", "on")


def env_str(key, default=""):
    return _decouple_config(key, default=default)


def env_bool(key, default=False):
    return _to_bool(env_str(key, None), default)


def env_int(key, default=0):
    v = env_str(key, None)
    try:
        return int(v) if v is not None else default
    except (TypeError, ValueError):
        return default


def env_list(key, default=""):
    return [p.strip().upper() for p in env_str(key, default).split(",") if p.strip()]


# ───────────── Base Config ─────────────
SECRET_KEY = env_str("SECRET_KEY", "change-me")
DEBUG = env_bool("DEBUG", False)

ALLOWED_HOSTS = [h.strip() for h in env_str("ALLOWED_HOSTS", "127.0.0.1,localhost,testserver").split(",") if h.strip()]

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ───────────── Installed Apps ─────────────
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "orders",
    "payments",
]

# ───────────── Middleware ─────────────
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

# ───────────── Templates ─────────────
ROOT_URLCONF = "simplepay_site.urls"
TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]
WSGI_APPLICATION = "simplepay_site.wsgi.application"

# ───────────── Database ─────────────
DATABASES = {
    "default": {
        "ENGINE": env_str("DB_ENGINE", "django.db.backends.sqlite3"),
        "NAME": env_str("DB_NAME", str(BASE_DIR / "db.sqlite3")),
        "USER": env_str("DB_USER", ""),
        "PASSWORD": env_str("DB_PASSWORD", ""),
        "HOST": env_str("DB_HOST", ""),
        "PORT": env_str("DB_PORT", ""),
    }
}

# ───────────── REST framework ─────────────
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework.authentication.SessionAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.AllowAny",
    ),
}

# ───────────── i18n / TZ ─────────────
LANGUAGE_CODE = "en-au"
TIME_ZONE = env_str("TIME_ZONE", "Australia/Sydney")
USE_I18N = True
USE_TZ = True

# ───────────── Static ─────────────
STATIC_URL = "/static/"
STATIC_ROOT = os.path.join(BASE_DIR, "staticfiles")

# ───────────── Sessions / messages ─────────────
MESSAGE_STORAGE = "django.contrib.messages.storage.session.SessionStorage"
SESSION_COOKIE_SAMESITE = "Lax"
CSRF_COOKIE_SAMESITE = "Lax"

if not DEBUG:
    SESSION_COOKIE_SECURE = env_bool("SESSION_COOKIE_SECURE", True)
    CSRF_COOKIE_SECURE = env_bool("CSRF_COOKIE_SECURE", True)

# ───────────── Payments (SimplePay) ─────────────
SIMPLEPAY_TEST_MODE = env_bool("SIMPLEPAY_TEST_MODE", True)

PAYMENTS = {
    "DEFAULT_GATEWAY": env_str("PAYMENTS_DEFAULT_GATEWAY", "simplepay"),
    "CURRENCY": env_str("PAYMENTS_CURRENCY", "AUD"),
    "TOKEN_TTL_MINUTES": env_int("PAYMENTS_TOKEN_TTL_MINUTES", 10),
    "CART_URL": env_str("PAYMENTS_CART_URL", "/"),
    "SIMPLEPAY": {
        "TEST_MODE": SIMPLEPAY_TEST_MODE,
        "SECURITY_SENDER": env_str("SIMPLEPAY_SECURITY_SENDER", ""),
        "TRANSACTION_CHANNEL": env_str("SIMPLEPAY_TRANSACTION_CHANNEL", ""),
        "TRANSACTION_MODE": env_str("SIMPLEPAY_TRANSACTION_MODE", ""),
        "USER_LOGIN": env_str("SIMPLEPAY_USER_LOGIN", ""),
        "USER_PWD": env_str("SIMPLEPAY_USER_PWD", ""),
        "PAYMENT_TYPE": env_str("SIMPLEPAY_PAYMENT_TYPE", ""),
        "ACCEPTED_BRANDS": env_list("SIMPLEPAY_ACCEPTED_BRANDS", "VISA,MASTER"),
        "TOKEN_TIMEOUT": env_int("SIMPLEPAY_TOKEN_TIMEOUT", 60),
        "STATUS_TIMEOUT": env_int("SIMPLEPAY_STATUS_TIMEOUT", 30),
    },
}

# ───────────── Logging ─────────────
LOG_DIR = BASE_DIR / "logs"
os.makedirs(LOG_DIR, exist_ok=True)

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "[{levelname}] {asctime} {name} :: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "verbose"},
        "file": {
            "class": "logging.FileHandler",
            "filename": str(LOG_DIR / "app.log"),
            "formatter": "verbose",
        },
    },
    "loggers": {
        "django": {"handlers": ["console", "file"], "level": "INFO"},
        "payments": {"handlers": ["console", "file"], "level": "DEBUG"},
        "orders": {"handlers": ["console", "file"], "level": "INFO"},
    },
    "root": {"handlers": ["console", "file"], "level": "INFO"},
}
