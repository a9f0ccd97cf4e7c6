"""
api/limiter.py -- Per-client-IP throttle for the credential endpoints.

POST /user/login and PUT /user/forgot-password take their limits from
LOGIN_RATE_LIMIT and FORGOT_PASSWORD_RATE_LIMIT; api/main.py mounts the
middleware and turns RateLimitExceeded into a 429 with Retry-After.

Counters live in process memory, so they reset on restart and are not shared
between workers. limiter.reset() clears them.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
