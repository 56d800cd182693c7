# Overview: Capability decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .permissions import Capability, capability_for, evaluate


def _run_guarded(capability: Capability, f, args, kwargs):
    decision = evaluate(capability, request)
    if not decision.allowed:
        return jsonify({"error": decision.reason}), decision.status

    g.current_user = decision.user
    return f(*args, **kwargs)


def route_authorizer(matrix):
    """
    Bind a route matrix and return an `authorize(path)` decorator factory.

    The capability is looked up by (path, request.method) at request time,
    so a view serving several verbs still gets the per-verb requirement.

    On success g.current_user holds the authenticated User (None for
    PUBLIC routes). On failure the view is not called and the denial is
    returned as JSON with 401 or 403.
    """
    def authorize(path: str):
        def decorator(f):
            @wraps(f)
            def decorated_function(*args, **kwargs):
                # Flask answers HEAD with the GET view
                method = "GET" if request.method == "HEAD" else request.method
                capability = capability_for(matrix, path, method)
                return _run_guarded(capability, f, args, kwargs)
            return decorated_function
        return decorator
    return authorize
