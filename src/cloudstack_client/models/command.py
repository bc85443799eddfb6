"""Catalog models: command, parameter and response-field descriptors."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple

from cloudstack_client.models.base_enum_model import BaseEnumModel


class ParameterType(BaseEnumModel):
    """Parameter types reported by listApis."""
    BOOLEAN = "boolean"
    DATE = "date"
    INTEGER = "integer"
    LIST = "list"
    LONG = "long"
    MAP = "map"
    SHORT = "short"
    STRING = "string"
    UUID = "uuid"
    TZDATE = "tzdate"

    @classmethod
    def parse(cls, value) -> "ParameterType":
        """Like ``from_dict`` but unknown or missing types fall back to STRING."""
        try:
            return cls.from_dict(value)
        except ValueError:
            return cls.STRING


class ResponseFormat(BaseEnumModel):
    JSON = "json"
    XML = "xml"


@dataclass(frozen=True)
class ParameterDescriptor:
    name: str
    type: ParameterType = ParameterType.STRING
    required: bool = False
    description: str = ""


@dataclass(frozen=True)
class ResponseFieldDescriptor:
    name: str
    type: str = ""
    description: str = ""


@dataclass(frozen=True)
class CommandDescriptor:
    """
    Everything the client knows about one remote command.

    Attributes:
        name (str): Command name in the server's casing, e.g. ``listVirtualMachines``.
        description (str): Human readable description.
        is_async (bool): Whether the command returns a job id to poll.
        parameters (Tuple[ParameterDescriptor, ...]): Declared parameters, unique by name.
        response_fields (Tuple[ResponseFieldDescriptor, ...]): Declared response fields, unique by name.
        related (Tuple[str, ...]): Names of related commands.
    """
    name: str
    description: str = ""
    is_async: bool = False
    parameters: Tuple[ParameterDescriptor, ...] = ()
    response_fields: Tuple[ResponseFieldDescriptor, ...] = ()
    related: Tuple[str, ...] = ()

    @property
    def required_parameters(self) -> Tuple[ParameterDescriptor, ...]:
        return tuple(p for p in self.parameters if p.required)

    @property
    def response_field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.response_fields)

    def get_parameter(self, name: str) -> Optional[ParameterDescriptor]:
        """Case-insensitive parameter lookup."""
        lowered = name.lower()
        for parameter in self.parameters:
            if parameter.name.lower() == lowered:
                return parameter
        return None


class CommandTable(Mapping):
    """Read-only, case-insensitive mapping of command name to descriptor."""

    def __init__(self, descriptors=()):
        table: Dict[str, CommandDescriptor] = {}
        for descriptor in descriptors:
            table.setdefault(descriptor.name.lower(), descriptor)
        self._table = MappingProxyType(table)

    def __getitem__(self, name: str) -> CommandDescriptor:
        return self._table[name.lower()]

    def __contains__(self, name) -> bool:
        return isinstance(name, str) and name.lower() in self._table

    def __iter__(self) -> Iterator[str]:
        return (descriptor.name for descriptor in self._table.values())

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"CommandTable({len(self)} commands)"
