"""
Django settings for casecompass project.
"""

from pathlib import Path
import os
from dotenv import load_dotenv

# Load environment variables before using them
load_dotenv()

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.getenv('SECRET_KEY')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'

ALLOWED_HOSTS = os.getenv('ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')

ADMINS = [
    ('Security', email) for email in os.getenv('SECURITY_ALERT_EMAILS', '').split(',') if email
]

# Application definition
INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Third-party apps
    'rest_framework',
    'rest_framework.authtoken',
    'drf_yasg',

    # Project apps
    'users',
    'rbac',
    'consent',
    'audit',
    'enforcement',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

# HIPAA Audit Logging
log_path = os.getenv('HIPAA_AUDIT_LOG_PATH', 'logs/hipaa_audit.log')
# Strip any comments if present
if '#' in log_path:
    log_path = log_path.split('#')[0].strip()
# Convert to absolute path if it's relative
if not os.path.isabs(log_path):
    log_path = os.path.join(BASE_DIR, log_path)
# Ensure directory exists
os.makedirs(os.path.dirname(log_path), exist_ok=True)

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'hipaa': {
            'format': '{asctime} {message}',
            'style': '{',
        },
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
        'hipaa_file': {
            'level': 'INFO',
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': log_path,
            'formatter': 'hipaa',
            'maxBytes': 10485760,  # 10MB
            'backupCount': 10,
        },
        'mail_admins': {
            'level': 'ERROR',
            'class': 'django.utils.log.AdminEmailHandler',
        },
    },
    'loggers': {
        'hipaa_audit': {
            'handlers': ['hipaa_file'],
            'level': 'INFO',
            'propagate': False,
        },
        # Operational channel for audit-write failures
        'casecompass.alerts': {
            'handlers': ['console', 'mail_admins'],
            'level': 'WARNING',
            'propagate': False,
        },
        'consent': {'handlers': ['console'], 'level': 'INFO'},
        'rbac': {'handlers': ['console'], 'level': 'INFO'},
        'enforcement': {'handlers': ['console'], 'level': 'INFO'},
        'audit': {'handlers': ['console'], 'level': 'INFO'},
        'users': {'handlers': ['console'], 'level': 'INFO'},
    },
}

ROOT_URLCONF = 'casecompass.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'casecompass.wsgi.application'

# Database configuration
if os.getenv('DB_ENGINE') == 'django.db.backends.postgresql':
    DATABASES = {
        'default': {
            'ENGINE': os.getenv('DB_ENGINE', 'django.db.backends.postgresql'),
            'NAME': os.getenv('DB_NAME', 'casecompass_db'),
            'USER': os.getenv('DB_USER', 'casecompass_user'),
            'PASSWORD': os.getenv('DB_PASSWORD', ''),
            'HOST': os.getenv('DB_HOST', 'localhost'),
            'PORT': os.getenv('DB_PORT', '5432'),
            'CONN_MAX_AGE': int(os.getenv('DB_CONN_MAX_AGE', '60')),
        }
    }
else:
    # SQLite for development
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }

# Django REST Framework settings
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'users.authentication.BearerTokenAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
}

AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator',
    },
]

# Swagger settings
SWAGGER_SETTINGS = {
    'SECURITY_DEFINITIONS': {
        'Bearer': {
            'type': 'apiKey',
            'name': 'Authorization',
            'in': 'header'
        }
    },
    'USE_SESSION_AUTH': False,
    'PERSIST_AUTH': True,
    'TAGS_SORTER': 'alpha',
    'OPERATIONS_SORTER': 'alpha',
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = os.getenv('STATIC_ROOT', BASE_DIR / 'staticfiles')

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Security settings
SECURE_SSL_REDIRECT = os.getenv('SECURE_SSL_REDIRECT', 'False').lower() == 'true'
SESSION_COOKIE_SECURE = os.getenv('SESSION_COOKIE_SECURE', 'False').lower() == 'true'
CSRF_COOKIE_SECURE = os.getenv('CSRF_COOKIE_SECURE', 'False').lower() == 'true'

SECURE_HSTS_SECONDS = 31536000  # 1 year
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'DENY'

# Session timeout (15 minutes of inactivity)
SESSION_COOKIE_AGE = 900  # seconds
SESSION_SAVE_EVERY_REQUEST = True
SESSION_EXPIRE_AT_BROWSER_CLOSE = True

# Email settings (security alerts go through mail_admins)
EMAIL_BACKEND = os.getenv('EMAIL_BACKEND', 'django.core.mail.backends.console.EmailBackend')
EMAIL_HOST = os.getenv('EMAIL_HOST', '')
EMAIL_PORT = int(os.getenv('EMAIL_PORT', '587'))
EMAIL_USE_TLS = os.getenv('EMAIL_USE_TLS', 'True').lower() == 'true'
EMAIL_HOST_USER = os.getenv('EMAIL_HOST_USER', '')
EMAIL_HOST_PASSWORD = os.getenv('EMAIL_HOST_PASSWORD', '')

# Custom user model
AUTH_USER_MODEL = 'users.CustomUser'

# Consent
CONSENT_DEFAULT_EXPIRY_DAYS = int(os.getenv('CONSENT_DEFAULT_EXPIRY_DAYS', '365'))

# Audit trail
AUDIT_ASYNC_WRITES = os.getenv('AUDIT_ASYNC_WRITES', 'True').lower() == 'true'
AUDIT_WRITE_TIMEOUT = float(os.getenv('AUDIT_WRITE_TIMEOUT', '2.0'))  # seconds
AUDIT_RETENTION_DAYS = int(os.getenv('AUDIT_RETENTION_DAYS', '2555'))  # 7 years
FAILED_LOGIN_THRESHOLD = int(os.getenv('FAILED_LOGIN_THRESHOLD', '3'))
SUSPICIOUS_ACCESS_THRESHOLD = int(os.getenv('SUSPICIOUS_ACCESS_THRESHOLD', '50'))
AUDIT_PHI_ACCESS_ACTIONS = [
    'VIEW_PHI',
    'VIEW_MEDICAL_RECORD',
    'VIEW_BILLING',
    'DOWNLOAD_DOCUMENT',
]
