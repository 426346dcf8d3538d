"""Shared slowapi limiter: mounted in api/main.py, applied to POST /login."""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
