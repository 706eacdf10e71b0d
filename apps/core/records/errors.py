from django.http import JsonResponse


class StudioError(Exception):
    status_code = 400
    default_message = 'Request failed.'

    def __init__(self, message=None, *, details=None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def as_payload(self):
        payload = {'error': self.message}
        if self.details:
            payload['details'] = self.details
        return payload


class ValidationError(StudioError):
    status_code = 400
    default_message = 'Invalid input.'


class NotFoundError(ValidationError):
    status_code = 404
    default_message = 'Record not found.'


class AuthorizationError(StudioError):
    status_code = 403
    default_message = 'Forbidden.'

    def __init__(self, message=None, *, authenticated=True, details=None):
        super().__init__(message, details=details)
        if not authenticated:
            self.status_code = 401


class NetworkError(StudioError):
    status_code = 503
    default_message = 'Storage is unavailable. Please try again.'


class UpstreamError(NetworkError):
    default_message = 'Upstream service failed.'

    def __init__(self, message=None, *, upstream_status=None, details=None):
        super().__init__(message, details=details)
        self.upstream_status = upstream_status
        # Rate limit and quota exhaustion are passed through; anything else is a bad gateway.
        self.status_code = upstream_status if upstream_status in {402, 429} else 502


class DuplicateError(StudioError):
    status_code = 429
    default_message = 'A registration with this number was already submitted recently.'


def error_response(exc: StudioError, **extra):
    payload = exc.as_payload()
    payload.update(extra)
    return JsonResponse(payload, status=exc.status_code)


def form_error_response(form, message='Please correct the highlighted fields.'):
    details = {field: [str(error) for error in errors] for field, errors in form.errors.items()}
    return error_response(ValidationError(message, details=details))
