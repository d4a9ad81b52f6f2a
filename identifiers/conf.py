from django.conf import settings

DEFAULTS = {
    "SEQUENCE_WIDTH": 3,
    "MAX_ATTEMPTS": 3,
    "BACKOFF_SECONDS": (0.05, 0.1, 0.2),
}


def identifier_settings():
    """``settings.IDENTIFIERS`` merged over the defaults."""
    merged = dict(DEFAULTS)
    merged.update(getattr(settings, "IDENTIFIERS", {}) or {})
    return merged
