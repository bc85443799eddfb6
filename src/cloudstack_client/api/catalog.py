"""Loads the command catalog from the listApis discovery call."""

from typing import Any, Dict, Iterable, List, Optional

from cloudstack_client.api.normalizer import PayloadParseError, detect_error, parse_payload, unwrap
from cloudstack_client.exceptions import CatalogError
from cloudstack_client.helpers.logger import setup_logging
from cloudstack_client.helpers.utils import as_list
from cloudstack_client.models.command import (
    CommandDescriptor,
    CommandTable,
    ParameterDescriptor,
    ParameterType,
    ResponseFieldDescriptor,
    ResponseFormat,
)
from cloudstack_client.models.results import ApiRequest

logger = setup_logging(__name__)

DISCOVERY_COMMAND = "listApis"


def _is_true(value: Any) -> bool:
    return str(value).strip().lower() == "true"


def _unique_by_name(entries: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Drop entries whose name repeats case-insensitively; the first casing wins."""
    seen = set()
    unique = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        name = str(entry.get("name") or "").strip()
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        unique.append(entry)
    return unique


def parse_api_entry(entry: Dict[str, Any]) -> CommandDescriptor:
    """
    Build a ``CommandDescriptor`` from one ``api`` element of listApis.

    :param entry: The parsed api element.
    :return: The immutable descriptor.
    """
    parameters = tuple(
        ParameterDescriptor(
            name=str(param["name"]).strip(),
            type=ParameterType.parse(param.get("type")),
            required=_is_true(param.get("required", False)),
            description=str(param.get("description") or ""),
        )
        for param in _unique_by_name(as_list(entry.get("params")))
    )
    response_fields = tuple(
        ResponseFieldDescriptor(
            name=str(field["name"]).strip(),
            type=str(field.get("type") or ""),
            description=str(field.get("description") or ""),
        )
        for field in _unique_by_name(as_list(entry.get("response")))
    )
    related = tuple(name.strip() for name in str(entry.get("related") or "").split(",") if name.strip())

    return CommandDescriptor(
        name=str(entry["name"]).strip(),
        description=str(entry.get("description") or ""),
        is_async=_is_true(entry.get("isasync", False)),
        parameters=parameters,
        response_fields=response_fields,
        related=related,
    )


def parse_catalog(payload: Dict[str, Any]) -> CommandTable:
    """
    Turn a parsed listApis payload into a ``CommandTable``.

    :raises CatalogError: If the payload is an error envelope.
    """
    _, body = unwrap(payload)
    error = detect_error(body)
    if error is not None:
        raise CatalogError(
            f"Catalog discovery failed: {error.message}",
            error_code=error.code,
            details={"errorcode": error.code, "displaytext": error.message},
        )

    entries = _unique_by_name(as_list(body.get("api")))
    return CommandTable(parse_api_entry(entry) for entry in entries)


def load_catalog(executor, response_format: Optional[ResponseFormat] = None) -> CommandTable:
    """
    Call listApis through the executor and build the command table.

    :param executor: An ``ApiExecutor`` bound to the session's profile.
    :param response_format: Format to request; the executor's configured format by default.
    :return: The immutable command table.
    :raises CatalogError: If discovery fails or the payload cannot be parsed.
    """
    response_format = response_format or ResponseFormat.from_dict(executor.settings.get("RESPONSE_FORMAT", "json"))
    request = ApiRequest(command=DISCOVERY_COMMAND, params=(), response_format=response_format)
    raw = executor.execute(request)

    try:
        payload = parse_payload(raw, response_format)
    except PayloadParseError as e:
        raise CatalogError(f"Catalog discovery returned an unreadable payload: {e}") from e

    table = parse_catalog(payload)
    logger.info("Command catalog loaded", server=executor.profile.server, commands=len(table))
    return table
