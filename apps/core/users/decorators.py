from functools import wraps

from apps.core.records.errors import AuthorizationError, error_response

from .tokens import resolve_request_user


def _normalize_roles(allowed_roles):
    if isinstance(allowed_roles, str):
        return {allowed_roles}
    return set(allowed_roles)


def role_required(allowed_roles):
    normalized_roles = _normalize_roles(allowed_roles)

    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            user = resolve_request_user(request)
            if user is None:
                return error_response(AuthorizationError('Unauthorized', authenticated=False))

            if user.role not in normalized_roles:
                return error_response(AuthorizationError('Forbidden'))

            request.api_user = user
            return view_func(request, *args, **kwargs)

        return wrapper

    return decorator
