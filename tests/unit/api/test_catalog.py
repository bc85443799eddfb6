"""Tests for the listApis catalog loader."""

import pytest
import requests

from cloudstack_client.api.catalog import load_catalog, parse_api_entry, parse_catalog
from cloudstack_client.api.normalizer import parse_payload
from cloudstack_client.exceptions import CatalogError
from cloudstack_client.models.command import CommandTable, ParameterType, ResponseFormat


@pytest.mark.unit
class TestParseApiEntry:
    """Test conversion of a single api entry."""

    def test_basic_fields(self, list_apis_payload):
        """Name, description, async flag and related commands are read."""
        entry = list_apis_payload["listapisresponse"]["api"][0]
        descriptor = parse_api_entry(entry)

        assert descriptor.name == "listVirtualMachines"
        assert descriptor.is_async is False
        assert descriptor.related == ("deployVirtualMachine", "destroyVirtualMachine")

    def test_parameters_deduplicated_case_insensitively(self, list_apis_payload):
        """Duplicate parameter names collapse to the first-seen casing."""
        descriptor = parse_api_entry(list_apis_payload["listapisresponse"]["api"][0])
        names = [p.name for p in descriptor.parameters]

        assert names == ["id", "ids", "name", "listall", "tags"]
        assert descriptor.get_parameter("NAME").description == "name of the VM"

    def test_response_fields_deduplicated(self, list_apis_payload):
        """Duplicate response fields collapse the same way."""
        descriptor = parse_api_entry(list_apis_payload["listapisresponse"]["api"][0])
        assert descriptor.response_field_names == ("id", "name", "state", "zonename")

    def test_parameter_types(self, list_apis_payload):
        """Parameter types map onto ParameterType."""
        descriptor = parse_api_entry(list_apis_payload["listapisresponse"]["api"][0])
        types = {p.name: p.type for p in descriptor.parameters}

        assert types["id"] is ParameterType.UUID
        assert types["ids"] is ParameterType.LIST
        assert types["tags"] is ParameterType.MAP

    def test_unknown_type_falls_back_to_string(self):
        """Types the client does not know become STRING."""
        descriptor = parse_api_entry({"name": "x", "params": [{"name": "p", "type": "object"}]})
        assert descriptor.parameters[0].type is ParameterType.STRING

    @pytest.mark.parametrize("flag,expected", [(True, True), ("true", True), ("TRUE", True), (False, False), ("yes", False)])
    def test_async_flag(self, flag, expected):
        """isasync is true only when it reads as "true"."""
        assert parse_api_entry({"name": "x", "isasync": flag}).is_async is expected

    def test_required_flag(self, list_apis_payload):
        """Required parameters are flagged."""
        descriptor = parse_api_entry(list_apis_payload["listapisresponse"]["api"][1])
        assert [p.name for p in descriptor.required_parameters] == ["serviceofferingid", "templateid", "zoneid"]

    def test_descriptor_is_immutable(self, list_apis_payload):
        """Descriptors cannot be modified after load."""
        descriptor = parse_api_entry(list_apis_payload["listapisresponse"]["api"][0])
        with pytest.raises(AttributeError):
            descriptor.name = "other"


@pytest.mark.unit
class TestParseCatalog:
    """Test building the command table."""

    def test_table_contents(self, list_apis_payload):
        """Every api entry becomes a command."""
        table = parse_catalog(list_apis_payload)

        assert isinstance(table, CommandTable)
        assert len(table) == 4
        assert "deployvirtualmachine" in table
        assert table["DEPLOYVIRTUALMACHINE"].is_async is True

    def test_table_is_read_only(self, list_apis_payload):
        """The table offers no mutation."""
        table = parse_catalog(list_apis_payload)
        with pytest.raises(TypeError):
            table["new"] = None

    def test_error_envelope_raises(self):
        """An error envelope from discovery raises CatalogError."""
        payload = {"listapisresponse": {"displaytext": "Unable to connect", "errorcode": "531", "success": "false"}}
        with pytest.raises(CatalogError) as exc_info:
            parse_catalog(payload)
        assert exc_info.value.error_code == "531"

    def test_xml_catalog(self):
        """The XML form of listApis parses to the same descriptors."""
        text = (
            "<listapisresponse><count>1</count><api>"
            "<name>startVirtualMachine</name><description>Starts a VM</description>"
            "<isasync>true</isasync><related>stopVirtualMachine</related>"
            "<params><name>id</name><type>uuid</type><required>true</required></params>"
            "<params><name>hostid</name><type>uuid</type><required>false</required></params>"
            "<response><name>id</name><type>string</type></response>"
            "</api></listapisresponse>"
        )
        table = parse_catalog(parse_payload(text, ResponseFormat.XML))
        descriptor = table["startVirtualMachine"]

        assert descriptor.is_async is True
        assert [p.name for p in descriptor.required_parameters] == ["id"]
        assert descriptor.response_field_names == ("id",)


@pytest.mark.unit
class TestLoadCatalog:
    """Test the discovery call."""

    def test_load_calls_list_apis(self, executor, http_session, list_apis_payload, response_factory):
        """load_catalog issues exactly one listApis call."""
        http_session.get.return_value = response_factory(list_apis_payload)
        table = load_catalog(executor)

        assert len(table) == 4
        assert http_session.get.call_count == 1
        assert "command=listApis" in http_session.get.call_args[0][0]

    def test_transport_failure_raises_catalog_error(self, executor, http_session):
        """A transport failure during discovery surfaces as CatalogError."""
        http_session.get.side_effect = requests.ConnectionError("Connection refused")
        with pytest.raises(CatalogError):
            load_catalog(executor)

    def test_unreadable_payload_raises_catalog_error(self, executor, http_session, response_factory):
        """Garbage from the server surfaces as CatalogError."""
        http_session.get.return_value = response_factory(text="<html>login</html>")
        with pytest.raises(CatalogError):
            load_catalog(executor)

    def test_empty_catalog(self, executor, http_session, response_factory):
        """A server with no commands yields an empty table."""
        http_session.get.return_value = response_factory({"listapisresponse": {}})
        assert len(load_catalog(executor)) == 0

    def test_requests_given_format(self, executor, http_session, list_apis_payload, response_factory):
        """The discovery request asks for the given format."""
        http_session.get.return_value = response_factory(list_apis_payload)
        load_catalog(executor, ResponseFormat.JSON)
        assert "response=json" in http_session.get.call_args[0][0]
