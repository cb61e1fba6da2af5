import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///meowtodo.db").replace("postgres://", "postgresql://", 1)
SQLALCHEMY_DATABASE_URI = DATABASE_URL

SECRET_KEY = os.getenv("SECRET_KEY")

# werkzeug hash method; the salt is generated per password
PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

# Pagination for GET /todos
TODOS_PAGE_SIZE = int(os.getenv("TODOS_PAGE_SIZE", "10"))
TODOS_MAX_PAGE_SIZE = 100

# Preference cookies: None means a session cookie, e.g. 31536000 for one year
_cookie_max_age = os.getenv("PREFERENCE_COOKIE_MAX_AGE")
PREFERENCE_COOKIE_MAX_AGE = int(_cookie_max_age) if _cookie_max_age else None

# Sign-in rate limiting, per identifier
SIGNIN_MAX_ATTEMPTS = 5
SIGNIN_WINDOW_MINUTES = 15

DEMO_ACCOUNT_ENABLED = os.getenv("DEMO_ACCOUNT_ENABLED", "true").lower() in ("1", "true", "yes")

# JSON API only; sessions ride on the Flask session cookie
SESSION_COOKIE_SAMESITE = "Lax"
REMEMBER_COOKIE_SAMESITE = "Lax"
