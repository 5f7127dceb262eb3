from functools import wraps

from flask_jwt_extended import verify_jwt_in_request

from library_ledger.utils.auth import current_identity, json_error


def role_required(*roles):
    """Let the request through only when the token's role claim is one of ``roles``."""
    denied = f"{' or '.join(roles).capitalize()} access required"

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            _user_id, role = current_identity()
            if role not in roles:
                return json_error("forbidden", denied, 403)
            return fn(*args, **kwargs)
        return wrapper
    return decorator
