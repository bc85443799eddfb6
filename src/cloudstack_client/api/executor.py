"""HTTP execution of signed API calls."""

import json
import re
import xml.etree.ElementTree as ET
from typing import Optional, Tuple

import requests

from cloudstack_client.api.normalizer import PayloadParseError, parse_payload, unwrap
from cloudstack_client.api.signer import encode_pairs, encode_value, sign
from cloudstack_client.config.settings import settings as default_settings
from cloudstack_client.helpers.logger import setup_logging
from cloudstack_client.models.command import ResponseFormat
from cloudstack_client.models.profile import ConnectionProfile
from cloudstack_client.models.results import ApiRequest

logger = setup_logging(__name__)

_LEADING_CODE = re.compile(r"^(\d+)\s*(.*)$", re.DOTALL)


def split_error_message(message: str) -> Tuple[str, str]:
    """
    Split a failure message into ``(errorcode, displaytext)``.

    A leading run of digits is the error code and is stripped from the text;
    without one the code defaults to ``"1"``.
    """
    message = (message or "").strip()
    match = _LEADING_CODE.match(message)
    if match:
        return match.group(1), match.group(2).strip()
    return "1", message


def synthesize_error_envelope(command: str, message: str, response_format: ResponseFormat) -> str:
    """Build ``{"<command>response": {displaytext, errorcode, success}}`` in the requested format."""
    errorcode, displaytext = split_error_message(message)
    wrapper = f"{command.lower()}response"

    if response_format is ResponseFormat.XML:
        root = ET.Element(wrapper)
        ET.SubElement(root, "displaytext").text = displaytext
        ET.SubElement(root, "errorcode").text = errorcode
        ET.SubElement(root, "success").text = "false"
        return ET.tostring(root, encoding="unicode")

    return json.dumps({wrapper: {"displaytext": displaytext, "errorcode": errorcode, "success": "false"}})


def _http_error_message(response: requests.Response, response_format: ResponseFormat) -> str:
    """``"<status> <errortext or reason>"`` for a non-2xx response."""
    text = response.reason or "HTTP error"
    try:
        _, body = unwrap(parse_payload(response.text, response_format))
    except PayloadParseError:
        body = {}
    if body.get("errortext"):
        text = body["errortext"]
    return f"{response.status_code} {text}"


class ApiExecutor:
    """
    Builds, signs and sends API calls for one connection profile.

    Transport and HTTP failures never raise out of ``send`` or ``execute``; they come back
    as a synthesized error envelope in the requested format.
    """

    def __init__(
        self,
        profile: ConnectionProfile,
        session: Optional[requests.Session] = None,
        settings=None,
    ) -> None:
        """
        Initialize the executor.

        :param profile: Connection profile supplying address and credentials.
        :param session: HTTP session to use; a new ``requests.Session`` by default.
        :param settings: Settings object; the process settings by default.
        """
        self.profile = profile
        self.settings = settings or default_settings
        self.session = session or requests.Session()
        self.timeout = float(self.settings.get("HTTP_TIMEOUT", 30.0))
        self.verify_ssl = bool(self.settings.get("VERIFY_SSL", True))

    @property
    def base_url(self) -> str:
        return self.profile.base_url

    def build_url(self, request: ApiRequest) -> str:
        """
        Build the full signed URL for a request.

        :param request: The validated request.
        :return: ``<base>?command=..&response=..&<params>&apikey=..&signature=..``
        """
        query_params = [("response", request.response_format.value)] + list(request.params)
        signature = sign(request.command, query_params, self.profile.api_key, self.profile.secret_key)

        tokens = [f"command={encode_value(request.command)}"]
        tokens.extend(encode_pairs(query_params))
        tokens.append(f"apikey={encode_value(self.profile.api_key)}")
        tokens.append(f"signature={signature}")
        return f"{self.base_url}?{'&'.join(tokens)}"

    def send(self, request: ApiRequest) -> Tuple[str, bool]:
        """
        Perform the HTTP call.

        :param request: The validated request.
        :return: ``(payload text, synthesized)``; ``synthesized`` is true when the
            text is an error envelope built locally for a transport or HTTP failure.
        """
        url = self.build_url(request)
        logger.debug("Executing API call", command=request.command, server=self.profile.server)

        try:
            response = self.session.get(url, timeout=self.timeout, verify=self.verify_ssl)
        except requests.RequestException as e:
            logger.warning("Transport failure", command=request.command, error=str(e))
            return synthesize_error_envelope(request.command, str(e), request.response_format), True

        if not response.ok:
            message = _http_error_message(response, request.response_format)
            logger.warning("HTTP failure", command=request.command, status=response.status_code)
            return synthesize_error_envelope(request.command, message, request.response_format), True

        return response.text, False

    def execute(self, request: ApiRequest) -> str:
        """Perform the HTTP call and return the payload text or a synthesized error envelope."""
        return self.send(request)[0]

    def close(self) -> None:
        self.session.close()
