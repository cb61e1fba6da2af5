"""
Per-browser display preferences, persisted as cookies.
"""

DEFAULT_PREFERENCES = {
    "sortByDueDate": True,
    "hideCompletedUser": False,
}

COOKIE_NAMES = {
    "sortByDueDate": "preference_sortByDueDate",
    "hideCompletedUser": "preference_hideCompletedUser",
}


def parse_bool(value, default):
    """'true'/'false' (also 1/0, yes/no, any case); anything else falls back to default."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
    return default


def read_preferences(cookies):
    """Preferences from a cookie mapping, with defaults for missing or garbled values."""
    return {
        key: parse_bool(cookies.get(cookie_name), DEFAULT_PREFERENCES[key])
        for key, cookie_name in COOKIE_NAMES.items()
    }


def pick_updates(data):
    """Only known keys with real booleans are written."""
    return {
        key: value
        for key, value in data.items()
        if key in COOKIE_NAMES and isinstance(value, bool)
    }


def write_preferences(response, updates, max_age=None):
    for key, value in updates.items():
        response.set_cookie(
            COOKIE_NAMES[key],
            "true" if value else "false",
            max_age=max_age,
            path="/",
            httponly=True,
            samesite="Lax",
        )
    return response
