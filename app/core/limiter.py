"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports. Limit strings live here, one per
endpoint family. Limits are per client address and per process.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

CREATE_ACCESS_KEY_LIMIT = "100/15 minutes"
REDEEM_ACCESS_KEY_LIMIT = "50/15 minutes"
GRANT_ROLE_LIMIT = "10/hour"
CREATE_ORDER_LIMIT = "30/hour"

limit_create_access_key = limiter.limit(CREATE_ACCESS_KEY_LIMIT)
limit_redeem_access_key = limiter.limit(REDEEM_ACCESS_KEY_LIMIT)
limit_grant_role = limiter.limit(GRANT_ROLE_LIMIT)
limit_create_order = limiter.limit(CREATE_ORDER_LIMIT)
