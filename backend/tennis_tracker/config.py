import os

def _canon_prefix(val):
    """
    Normalize API prefix to always be exactly like '/api':
      - defaults to '/api' when unset/empty
      - ensures a single leading slash
      - removes any trailing slash (except for root)
    """
    val = (val or "/api").strip()
    if not val.startswith("/"):
        val = "/" + val
    if len(val) > 1 and val.endswith("/"):
        val = val[:-1]
    return val


def _positive_float(raw, default: float) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    return value if value >= 0 else default


API_PREFIX = _canon_prefix(os.getenv("API_PREFIX"))

MATCH_RATE_LIMIT = (os.getenv("MATCH_RATE_LIMIT") or "30/minute").strip()
STATS_CACHE_TTL_SECONDS = _positive_float(
    os.getenv("STATS_CACHE_TTL_SECONDS"), 300.0
)

DEFAULT_RATING = 1200


def rate_limits_disabled() -> bool:
    return (os.getenv("DISABLE_RATE_LIMITS") or "").lower() == "true"
