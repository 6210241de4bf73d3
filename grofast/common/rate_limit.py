"""Rate limiting (slowapi).

The limiter is attached to ``app.state`` in main.py; routers decorate
sensitive endpoints with ``@limiter.limit("N/period")``.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

SIGN_IN_LIMIT = "10/minute"

limiter = Limiter(key_func=get_remote_address)
