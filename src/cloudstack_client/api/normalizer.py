"""Response parsing and normalization.

Payloads arrive as JSON or XML text. Both are parsed into the same nested
dict/list structure (``parse_payload``), keyed by the ``<command>response``
wrapper, and then turned into ``SuccessResult``/``ErrorResult`` objects driven
by the command's declared response fields (``normalize``).
"""

import json
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Tuple

from cloudstack_client.helpers.logger import setup_logging
from cloudstack_client.helpers.utils import case_insensitive_get
from cloudstack_client.models.command import CommandDescriptor, ResponseFormat
from cloudstack_client.models.results import ApiResult, ErrorResult, SuccessResult

logger = setup_logging(__name__)

FLAT_ENVELOPE_KEYS = {"displaytext", "success"}
METADATA_KEYS = {"count", "cloud-stack-version"}


class PayloadParseError(ValueError):
    """Raised when a payload is neither valid JSON nor valid XML."""


def parse_payload(text: str, response_format: ResponseFormat) -> Dict[str, Any]:
    """
    Parse raw response text into a dict.

    :param text: Raw payload.
    :param response_format: Format the payload was requested in.
    :return: ``{"<command>response": {...}}``
    :raises PayloadParseError: If the text cannot be parsed.
    """
    if response_format is ResponseFormat.XML:
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise PayloadParseError(f"Invalid XML payload: {e}") from e
        return {root.tag.lower(): _element_to_value(root)}

    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise PayloadParseError(f"Invalid JSON payload: {e}") from e
    if not isinstance(data, dict):
        raise PayloadParseError("Invalid JSON payload: expected an object")
    return data


def _element_to_value(element: ET.Element) -> Any:
    children = list(element)
    if not children:
        return (element.text or "").strip()

    value: Dict[str, Any] = {}
    for child in children:
        child_value = _element_to_value(child)
        tag = child.tag
        if tag in value:
            existing = value[tag]
            if not isinstance(existing, list):
                value[tag] = [existing]
            value[tag].append(child_value)
        else:
            value[tag] = child_value
    return value


def unwrap(payload: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    """Return the ``(wrapper name, wrapper body)`` of a parsed payload."""
    for key, value in payload.items():
        if key.lower().endswith("response"):
            return key, value if isinstance(value, dict) else {}
    if len(payload) == 1:
        key, value = next(iter(payload.items()))
        return key, value if isinstance(value, dict) else {}
    return "", payload


def _is_false(value: Any) -> bool:
    return str(value).strip().lower() == "false"


def detect_error(body: Dict[str, Any]) -> Optional[ErrorResult]:
    """
    Recognise an error envelope.

    ``displaytext`` non-empty with ``success == "false"`` is an error, as is a
    server error body carrying ``errortext``.
    """
    displaytext = body.get("displaytext")
    if displaytext and _is_false(body.get("success", "")):
        return ErrorResult(code=str(body.get("errorcode", "1")), message=str(displaytext))

    errortext = body.get("errortext")
    if errortext:
        return ErrorResult(code=str(body.get("errorcode", "1")), message=str(errortext))
    return None


def _project(item: Dict[str, Any], descriptor: CommandDescriptor) -> Dict[str, Any]:
    return {name: case_insensitive_get(item, name) for name in descriptor.response_field_names}


def _child_items(body: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
    items: List[Dict[str, Any]] = []
    found = False
    for key, value in body.items():
        if key in METADATA_KEYS:
            continue
        if isinstance(value, dict):
            found = True
            items.append(value)
        elif isinstance(value, list):
            found = True
            items.extend(v for v in value if isinstance(v, dict))
    return items if found else None


def _declared_scalars(body: Dict[str, Any], descriptor: CommandDescriptor) -> bool:
    declared = {name.lower() for name in descriptor.response_field_names}
    return any(
        key.lower() in declared and not isinstance(value, (dict, list))
        for key, value in body.items()
        if key not in METADATA_KEYS
    )


def normalize_body(body: Dict[str, Any], descriptor: CommandDescriptor) -> ApiResult:
    """
    Normalize an already unwrapped response body (or a job's ``jobresult``).

    A body carrying declared response fields at its own level is the single
    item, even when it also nests objects. Otherwise each nested object is an
    item, and a body of scalars alone is the single item.
    """
    error = detect_error(body)
    if error is not None:
        return error

    if body and set(k.lower() for k in body) <= FLAT_ENVELOPE_KEYS:
        success = not _is_false(body.get("success", "true"))
        return SuccessResult(items=({"success": success, "displaytext": body.get("displaytext", "")},))

    if _declared_scalars(body, descriptor):
        return SuccessResult(items=(_project(body, descriptor),))

    children = _child_items(body)
    if children is not None:
        return SuccessResult(items=tuple(_project(child, descriptor) for child in children))

    scalars = {k: v for k, v in body.items() if k not in METADATA_KEYS}
    if not scalars:
        return SuccessResult(items=())
    return SuccessResult(items=(_project(scalars, descriptor),))


def normalize(payload: Dict[str, Any], descriptor: CommandDescriptor) -> ApiResult:
    """
    Convert a parsed payload into an ``ApiResult``.

    Every success item carries exactly the response fields declared on the
    descriptor; fields missing from the payload are ``None``.
    """
    wrapper, body = unwrap(payload)
    result = normalize_body(body, descriptor)
    if isinstance(result, ErrorResult):
        logger.debug("API error response", command=descriptor.name, wrapper=wrapper, errorcode=result.code)
    return result
