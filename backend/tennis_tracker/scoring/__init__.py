"""Score model for recorded tennis matches."""

from . import tennis

__all__ = [
    "tennis",
]
