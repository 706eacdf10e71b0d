from .tokens import bearer_token


class BearerTokenCsrfExemptMiddleware:
    """Skip CSRF checks for requests that authenticate with a bearer token."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if bearer_token(request):
            request._dont_enforce_csrf_checks = True
        return self.get_response(request)
