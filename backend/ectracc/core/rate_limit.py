"""
Shared slowapi limiter; per-route limits come from settings.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from ectracc.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
