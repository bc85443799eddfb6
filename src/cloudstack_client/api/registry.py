"""Generic validation and dispatch of catalog commands."""

from dataclasses import replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from cloudstack_client.api.async_jobs import AsyncJobResolver
from cloudstack_client.api.normalizer import PayloadParseError, normalize, parse_payload
from cloudstack_client.exceptions import CommandNotFoundError, MissingParameterError
from cloudstack_client.helpers.logger import setup_logging
from cloudstack_client.models.command import CommandDescriptor, CommandTable, ResponseFormat
from cloudstack_client.models.results import ApiRequest, DispatchResult, ErrorResult

logger = setup_logging(__name__)


def serialize_value(value: Any) -> str:
    """Serialize a scalar or list argument; lists are joined with ``,``."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(serialize_value(item) for item in value)
    return str(value)


def serialize_argument(name: str, value: Any) -> List[Tuple[str, str]]:
    """
    Serialize one argument into query pairs.

    Maps use the indexed form ``name[0].key=value``; a list of maps is indexed
    per element. Everything else is a single ``name=value`` pair.
    """
    if isinstance(value, Mapping):
        value = [value]
    if isinstance(value, (list, tuple)) and value and all(isinstance(item, Mapping) for item in value):
        pairs = []
        for index, entry in enumerate(value):
            for key, item in entry.items():
                pairs.append((f"{name}[{index}].{key}", serialize_value(item)))
        return pairs
    return [(name, serialize_value(value))]


class CommandRegistry:
    """
    Validates and dispatches calls against a loaded ``CommandTable``.

    One generic entry point serves every command; nothing is generated per
    command.
    """

    def __init__(
        self,
        table: CommandTable,
        executor,
        resolver_factory: Callable[[Any], AsyncJobResolver] = AsyncJobResolver,
        response_format: Optional[ResponseFormat] = None,
    ) -> None:
        """
        Initialize the registry.

        :param table: Command table built by the catalog loader.
        :param executor: ``ApiExecutor`` for the session's profile.
        :param resolver_factory: Builds a fresh job resolver from the executor for each async dispatch.
        :param response_format: Format to request; the executor's configured format by default.
        """
        self.table = table
        self.executor = executor
        self.resolver_factory = resolver_factory
        self.response_format = response_format or ResponseFormat.from_dict(
            executor.settings.get("RESPONSE_FORMAT", "json")
        )

    def resolve(self, name: str) -> CommandDescriptor:
        """
        Look up a command by name, ignoring case.

        :raises CommandNotFoundError: If the command is not in the catalog.
        """
        try:
            return self.table[name]
        except KeyError:
            raise CommandNotFoundError(name) from None

    def build_request(self, name: str, args: Optional[Dict[str, Any]] = None) -> ApiRequest:
        """
        Validate ``args`` against the descriptor and build the request.

        Undeclared arguments are dropped. Declared names are sent in the
        catalog's casing.

        :raises CommandNotFoundError: Unknown command.
        :raises MissingParameterError: A required parameter is absent or ``None``.
        """
        descriptor = self.resolve(name)
        args = args or {}

        accepted: Dict[str, Any] = {}
        for arg_name, value in args.items():
            parameter = descriptor.get_parameter(arg_name)
            if parameter is None:
                logger.debug("Dropping undeclared argument", command=descriptor.name, argument=arg_name)
                continue
            if value is None:
                continue
            accepted[parameter.name] = value

        missing = [p.name for p in descriptor.required_parameters if p.name not in accepted]
        if missing:
            raise MissingParameterError(descriptor.name, missing)

        params: List[Tuple[str, str]] = []
        for param_name, value in accepted.items():
            params.extend(serialize_argument(param_name, value))

        return ApiRequest(command=descriptor.name, params=tuple(params), response_format=self.response_format)

    def dispatch(
        self,
        name: str,
        args: Optional[Dict[str, Any]] = None,
        wait: Optional[int] = None,
        no_wait: bool = False,
    ) -> DispatchResult:
        """
        Validate, send and normalize a call.

        :param name: Command name.
        :param args: Argument map; values may be strings, lists, booleans or maps.
        :param wait: For async commands, the wait budget in time units (``None`` = unbounded).
        :param no_wait: For async commands, return after the first poll if still pending.
        :return: ``SuccessResult``, ``ErrorResult`` or, for async commands, ``PendingJobResult``.
        """
        request = self.build_request(name, args)
        descriptor = self.resolve(request.command)

        if descriptor.is_async:
            resolver = self.resolver_factory(self.executor)
            return resolver.resolve(request, descriptor, wait=wait, no_wait=no_wait)

        raw, synthesized = self.executor.send(request)
        try:
            payload = parse_payload(raw, request.response_format)
        except PayloadParseError as e:
            return ErrorResult(code="1", message=str(e))
        result = normalize(payload, descriptor)
        if synthesized and isinstance(result, ErrorResult):
            result = replace(result, transport=True)
        return result
