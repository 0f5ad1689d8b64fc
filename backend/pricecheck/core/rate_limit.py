"""Shared request rate limiter"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from pricecheck.core.config import settings

limiter = Limiter(key_func=get_remote_address)

# Applied to endpoints that write records or call into the comparison engine
WRITE_LIMIT = f"{settings.RATE_LIMIT_PER_MINUTE}/minute"
