"""
Response decoding for the Veracode JSON and XML APIs.

The Veracode APIs can return multiple different error response bodies.

A general error:

    {
       "http_code": 400,
       "http_status": "Bad Request",
       "message": "Invalid UUID string: abcd"
    }

An error with the provided query values:

    {
      "errors": ["team_id: Invalid value.", "role_id: not a valid GUID"],
      "status": 400
    }

An error returned by the Applications API:

    {
      "_embedded": {
        "api_errors": [{
          "id": "abcd",
          "code": "NOT_FOUND",
          "title": "The requested application could not be found",
          "status": "404"
        }]
      }
    }

The legacy XML APIs answer ``<error>message</error>`` with a 200 status.
All of them are normalized into ApiError.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Callable, List, Optional
from urllib.parse import urlsplit

import requests

from .constants import CONTENT_TYPE_JSON, CONTENT_TYPE_XML
from .exceptions import ApiError, DecodeError, UnsupportedContentTypeError
from .pagination import Response, new_response

logger = logging.getLogger(__name__)

Destination = Callable[[Any], Any]

XML_CONTENT_TYPES = (CONTENT_TYPE_XML, "application/xml")


def _direct_message(field):
    def extract(body: dict) -> List[str]:
        value = body.get(field)
        if isinstance(value, str) and value:
            return [value]
        return []
    return extract


def _errors_array(body: dict) -> List[str]:
    errors = body.get("errors")
    if not isinstance(errors, list):
        return []
    return [e if isinstance(e, str) else str(e) for e in errors]


def _embedded_api_errors(body: dict) -> List[str]:
    embedded = body.get("_embedded")
    if not isinstance(embedded, dict):
        return []
    api_errors = embedded.get("api_errors")
    if not isinstance(api_errors, list):
        return []
    return [e.get("title") or "" for e in api_errors if isinstance(e, dict)]


# Tried in order; the first dialect that yields messages wins.
JSON_ERROR_DIALECTS = (
    ("title", _direct_message("title")),
    ("message", _direct_message("message")),
    ("errors", _errors_array),
    ("embedded_api_errors", _embedded_api_errors),
)


def messages_from_json(body: Any) -> List[str]:
    """
    Extract error messages from a decoded JSON error body.

    Returns an empty list when no known dialect matches.
    """
    if not isinstance(body, dict):
        return []

    for name, extract in JSON_ERROR_DIALECTS:
        messages = extract(body)
        if messages:
            logger.debug("Error body matched the %s dialect", name)
            return messages
    return []


def messages_from_xml(element: ET.Element) -> List[str]:
    """Extract the message of an ``<error>`` element."""
    return [(element.text or "").strip()]


def endpoint_of(response: requests.Response) -> str:
    url = response.request.url if response.request is not None else response.url
    return urlsplit(url or "").path


def media_type(content_type: Optional[str]) -> str:
    """``application/json;charset=UTF-8`` -> ``application/json``"""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def is_json(media: str) -> bool:
    return media == CONTENT_TYPE_JSON or (media.startswith("application/") and media.endswith("+json"))


def is_xml(media: str) -> bool:
    return media in XML_CONTENT_TYPES


def is_success(status_code: int) -> bool:
    return 200 <= status_code <= 299


def new_api_error(response: requests.Response) -> ApiError:
    """Unmarshal a JSON error response into an ApiError."""
    messages = []
    if response.content:
        try:
            messages = messages_from_json(response.json())
        except ValueError:
            logger.debug("Error body from %s is not JSON", response.url)

    return ApiError(response.status_code, endpoint_of(response), messages)


def _apply(destination: Destination, payload: Any) -> Any:
    try:
        return destination(payload)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise DecodeError(f"failed to decode response body: {e}") from e


def decode_json(response: requests.Response, destination: Optional[Destination]) -> Response:
    """
    Handle a response from the JSON APIs.

    Any status outside 200-299 is an error; the body is then parsed as an
    error body instead of into ``destination``.
    """
    if not is_success(response.status_code):
        raise new_api_error(response)

    if destination is None or not response.content:
        return new_response(response)

    try:
        payload = response.json()
    except ValueError as e:
        raise DecodeError(f"failed to decode JSON response body: {e}") from e

    return new_response(response, _apply(destination, payload))


def decode_xml(response: requests.Response, destination: Optional[Destination]) -> Response:
    """
    Handle a response from the XML APIs.

    The XML APIs return 200 even on errors, so the status code is not
    checked. The name of the document element decides instead.
    """
    if not response.content.strip():
        return new_response(response)

    try:
        root = ET.fromstring(response.content)
    except ET.ParseError as e:
        raise DecodeError(f"failed to decode XML response body: {e}") from e

    if root.tag.rpartition("}")[2] == "error":
        raise ApiError(response.status_code, endpoint_of(response), messages_from_xml(root))

    if destination is None:
        return new_response(response)

    return new_response(response, _apply(destination, root))


def decode_response(response: requests.Response, destination: Optional[Destination] = None) -> Response:
    """
    Classify ``response`` as success or error and decode its body.

    Args:
        response: Raw requests response
        destination: Callable receiving the parsed JSON (dict/list) or the XML
            document element and returning the typed result

    Returns:
        Response envelope

    Raises:
        ApiError: If the API returned an error
        DecodeError: If a successful body cannot be decoded
        UnsupportedContentTypeError: If the body is neither JSON nor XML
    """
    content_type = response.headers.get("Content-Type")
    media = media_type(content_type)
    logger.debug("Decoding %s response from %s", media or "untyped", response.url)

    if is_json(media):
        return decode_json(response, destination)

    if is_xml(media):
        return decode_xml(response, destination)

    if destination is None:
        if not is_success(response.status_code):
            raise ApiError(response.status_code, endpoint_of(response), [])
        return new_response(response)

    raise UnsupportedContentTypeError(content_type)
