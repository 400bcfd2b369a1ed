from functools import wraps

from flask import g, jsonify
from flask_login import current_user


def api_login_required(admin=False):
    def decorator(func):
        @wraps(func)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({"error": "Not authenticated"}), 401
            if admin and not current_user.is_admin:
                return jsonify({"error": "Admin access required"}), 403
            g.api_user = current_user._get_current_object()
            return func(*args, **kwargs)

        return wrapped

    return decorator
