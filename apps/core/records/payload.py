import json

from .errors import ValidationError


def request_payload(request):
    """Return the request body as a dict, accepting JSON or form encoding."""
    if request.content_type == 'application/json':
        try:
            data = json.loads(request.body or b'{}')
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise ValidationError('Request body must be valid JSON.')
        if not isinstance(data, dict):
            raise ValidationError('Request body must be a JSON object.')
        return data
    return request.POST.dict()
