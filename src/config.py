import os
from datetime import timedelta, timezone
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


# -----------------------------------------------------------
# General
# -----------------------------------------------------------
PRODUCTION = os.environ.get('PRODUCTION', 'false').lower() == 'true'
JWT_SECRET = os.environ.get('JWT_SECRET', 'change-me')
JWT_LIFETIME_SECONDS = int(os.environ.get('JWT_LIFETIME_SECONDS', 7200))
SQLALCHEMY_ECHO = os.environ.get('SQLALCHEMY_ECHO', 'false').lower() == 'true'
ROOT_DIR = Path(__file__).parent.parent
LOG_DIR = os.environ.get('LOG_DIR', os.path.join(ROOT_DIR, "log"))
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
TZ = timezone(offset=timedelta(hours=7), name='WIB')


# -----------------------------------------------------------
# Main PostgreSQL database
# -----------------------------------------------------------
DB_FQDN_HOST = os.environ.get('DB_FQDN_HOST', 'localhost')
DB_PORT = int(os.environ.get('DB_PORT', 5432))
DB_NAME = os.environ.get('DB_NAME', 'revenue')
DB_USER = os.environ.get('DB_USER', 'postgres')
DB_PASSWORD = os.environ.get('DB_PASSWORD', '')
SCHEMA = os.environ.get('DB_SCHEMA') or None
SSL_REQUIRED = os.environ.get('SSL_REQUIRED', 'false').lower() == 'true'
PROD_URI = "postgresql+psycopg://{}:{}@{}:{}/{}".format(
    DB_USER,
    DB_PASSWORD,
    DB_FQDN_HOST,
    DB_PORT,
    DB_NAME
)

# Full connection string, overrides the PostgreSQL parameters above
DB_URI = os.environ.get('DB_URI') or PROD_URI


# -----------------------------------------------------------
# Built-in administrator
# -----------------------------------------------------------
BUILTIN_ADMIN_EMAIL = os.environ.get('BUILTIN_ADMIN_EMAIL')
BUILTIN_ADMIN_PASSWORD = os.environ.get('BUILTIN_ADMIN_PASSWORD')
BUILTIN_ADMIN_NAME = os.environ.get('BUILTIN_ADMIN_NAME', 'Administrator')


# -----------------------------------------------------------
# Revenue ledger
# -----------------------------------------------------------
DEFAULT_PAGE_LIMIT = int(os.environ.get('DEFAULT_PAGE_LIMIT', 10000))
TOP_LIMIT = 10


# -----------------------------------------------------------
# API client
# -----------------------------------------------------------
API_URL = os.environ.get('API_URL', 'http://localhost:3001/api')
API_TIMEOUT = float(os.environ.get('API_TIMEOUT', 30))
