"""Helpers for reading JSON bodies and error text from httpx responses."""

import httpx

from common.exceptions import DecodeError


def error_text(response: httpx.Response) -> str:
    """
    Extract the server's error message from a response.

    Args:
        response: HTTP response object

    Returns:
        The JSON 'error' field when present, else the raw body
    """
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(data, dict) and data.get('error'):
        return str(data['error'])
    return response.text or f"HTTP {response.status_code}"


def decode_json(response: httpx.Response) -> dict:
    """
    Decode a response body that must be a JSON object.

    Raises:
        DecodeError: If the body is not JSON or not an object
    """
    try:
        data = response.json()
    except ValueError as e:
        raise DecodeError(f"Response body is not JSON: {response.text[:200]!r}") from e
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object, got {type(data).__name__}")
    return data
