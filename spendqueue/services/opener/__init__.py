"""URL opener services package."""

from spendqueue.services.opener.url_opener import UrlOpener, UrlOpenerError

__all__ = [
    "UrlOpener",
    "UrlOpenerError",
]
