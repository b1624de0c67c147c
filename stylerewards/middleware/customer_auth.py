"""
Customer Authentication Middleware.

Authentication itself belongs to the upstream auth gateway. By the time a
request reaches this service the gateway has verified the session and
forwarded the customer's stable identifier in the X-Customer-ID header; this
module only extracts it.
"""
from functools import wraps
from flask import request, g

from ..utils.errors import unauthorized

CUSTOMER_ID_HEADER = 'X-Customer-ID'


def get_customer_id_from_request() -> str | None:
    """Verified customer id forwarded by the auth gateway, or None."""
    customer_id = request.headers.get(CUSTOMER_ID_HEADER, '').strip()
    return customer_id or None


def require_customer_auth(f):
    """
    Decorator to require an authenticated customer.

    Sets g.customer_id.

    Usage:
        @require_customer_auth
        def my_endpoint():
            customer_id = g.customer_id
            ...
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        customer_id = get_customer_id_from_request()
        if not customer_id:
            return unauthorized('Missing authenticated customer')

        g.customer_id = customer_id
        return f(*args, **kwargs)

    return decorated_function
