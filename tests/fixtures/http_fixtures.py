"""
HTTP test fixtures: mock ``requests`` responses.
"""

import json
from unittest.mock import Mock


def mock_response(status_code=200, body=None, headers=None, text=None):
    """Mock requests.Response.

    Args:
        status_code: HTTP status.
        body: JSON body (``None`` for an empty body).
        headers: Response headers.
        text: Raw non-JSON body; ``json()`` raises ValueError.
    """
    response = Mock()
    response.status_code = status_code
    response.headers = headers or {}
    response.reason = "Reason"
    if text is not None:
        response.text = text
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.text = json.dumps(body) if body is not None else ""
        response.json.return_value = body
    return response


def sent_body(mock_request, call_index=0):
    """Decoded JSON body of a recorded ``requests.request`` call."""
    return json.loads(mock_request.call_args_list[call_index].kwargs["data"])


def sent_url(mock_request, call_index=0):
    """URL of a recorded ``requests.request`` call."""
    return mock_request.call_args_list[call_index].args[1]
