"""
HTTP layer: the API client, captured responses and JSON path reads.
"""

from harness.api.client import ApiClient, Service, close_api_client, get_api_client
from harness.api.json_path import JsonPath, JsonPathError, read_path
from harness.api.response import CapturedResponse

__all__ = [
    "ApiClient",
    "CapturedResponse",
    "JsonPath",
    "JsonPathError",
    "Service",
    "close_api_client",
    "get_api_client",
    "read_path",
]
