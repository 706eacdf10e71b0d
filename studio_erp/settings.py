"""
Django settings for studio_erp project.

Scope:
- Lead pipeline with public registration, API ingestion and AI scoring
- Student enrollment, validity windows, ID cards and certificates
- Attendance, fee payments, expenses and notices
- Dashboard automation counters and a read-only parent portal
"""
import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent


DEBUG = os.getenv('DJANGO_DEBUG', 'False').lower() in {'1', 'true', 'yes'}
SECRET_KEY = os.getenv(
    'DJANGO_SECRET_KEY',
    'change-this-secret-key-in-production-5b1d8c04a7e94f3c9d2e61a0b7f3c852',
)
ALLOWED_HOSTS = [
    host.strip()
    for host in os.getenv('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',')
    if host.strip()
]


INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'apps.core.users.apps.UsersConfig',
    'apps.core.studio.apps.StudioConfig',
    'apps.academics.leads.apps.LeadsConfig',
    'apps.academics.students.apps.StudentsConfig',
    'apps.academics.attendance.apps.AttendanceConfig',
    'apps.finance.payments.apps.PaymentsConfig',
    'apps.finance.expenses.apps.ExpensesConfig',
    'apps.operations.communication.apps.CommunicationConfig',
]


MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'apps.core.users.middleware.BearerTokenCsrfExemptMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]


ROOT_URLCONF = 'studio_erp.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'studio_erp.wsgi.application'


DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
        'OPTIONS': {
            'timeout': int(os.getenv('DATABASE_TIMEOUT_SECONDS', '20')),
        },
    }
}
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


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


LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.getenv('STUDIO_TIME_ZONE', 'Asia/Kolkata')
USE_I18N = True
USE_TZ = True


STATIC_URL = 'static/'
MEDIA_URL = '/media/'
MEDIA_ROOT = BASE_DIR / 'media'
AUTH_USER_MODEL = 'users.User'


CSRF_COOKIE_SECURE = not DEBUG
SESSION_COOKIE_SECURE = not DEBUG
SECURE_SSL_REDIRECT = os.getenv('DJANGO_SECURE_SSL_REDIRECT', 'False').lower() in {'1', 'true', 'yes'}
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')


LOGIN_URL = '/login/'


LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
        },
    },
    'loggers': {
        'apps': {
            'handlers': ['console'],
            'level': os.getenv('STUDIO_LOG_LEVEL', 'INFO').upper(),
            'propagate': False,
        },
    },
}


STUDIO_NAME = os.getenv('STUDIO_NAME', 'Art Neelam Academy')
STUDIO_CONTACT = os.getenv('STUDIO_CONTACT', '+91 9920546217')
STUDIO_ADMIN_WHATSAPP = os.getenv('STUDIO_ADMIN_WHATSAPP', '919920546217')
STUDIO_COUNTRY_CODE = os.getenv('STUDIO_COUNTRY_CODE', '91')
STUDIO_ROLL_PREFIX = os.getenv('STUDIO_ROLL_PREFIX', 'ANA')

LEAD_API_KEY = os.getenv('LEAD_API_KEY', '')
API_TOKEN_MAX_AGE_SECONDS = int(os.getenv('API_TOKEN_MAX_AGE_SECONDS', str(12 * 60 * 60)))

SCORING_API_URL = os.getenv('SCORING_API_URL', 'https://ai.gateway.lovable.dev/v1/chat/completions')
SCORING_API_KEY = os.getenv('SCORING_API_KEY', '')
SCORING_MODEL = os.getenv('SCORING_MODEL', 'google/gemini-3-flash-preview')
SCORING_TIMEOUT_SECONDS = float(os.getenv('SCORING_TIMEOUT_SECONDS', '30'))

REGISTRATION_DUPLICATE_WINDOW_HOURS = int(os.getenv('REGISTRATION_DUPLICATE_WINDOW_HOURS', '24'))
FEES_DUE_SOON_DAYS = int(os.getenv('FEES_DUE_SOON_DAYS', '3'))
BIRTHDAY_WINDOW_DAYS = int(os.getenv('BIRTHDAY_WINDOW_DAYS', '30'))
LEAD_SCORER_CLASS = os.getenv('LEAD_SCORER_CLASS', 'apps.operations.scoring.scorers.HostedLeadScorer')
