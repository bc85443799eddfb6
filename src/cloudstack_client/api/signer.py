"""Request signing.

The server recomputes the signature from the received query string, so every
step here has to match it exactly: encode the values, sort the ``name=value``
tokens ordinally, lowercase the whole string, HMAC-SHA1 it with the secret key,
then base64 and percent-encode the digest.
"""

import base64
import hashlib
import hmac
from typing import Iterable, List, Tuple
from urllib.parse import quote_plus


def encode_value(value) -> str:
    """
    Percent-encode a single query value.

    Spaces become ``%20``, ``+`` becomes ``%2B`` and ``~`` becomes ``%7E``, as
    the server encodes them when it recomputes the signature.
    """
    return quote_plus(str(value), safe="*").replace("+", "%20").replace("~", "%7E")


def encode_pairs(pairs: Iterable[Tuple[str, str]]) -> List[str]:
    """Encode name/value pairs into ``name=value`` tokens, preserving order."""
    return [f"{name}={encode_value(value)}" for name, value in pairs]


def canonical_string(tokens: Iterable[str]) -> str:
    """Sort ``name=value`` tokens ordinally, join with ``&`` and lowercase."""
    return "&".join(sorted(tokens)).lower()


def build_signature(tokens: Iterable[str], secret_key: str) -> str:
    """
    Sign already-encoded ``name=value`` tokens.

    :param tokens: Encoded tokens, including ``apikey``.
    :param secret_key: The profile's secret key.
    :return: The percent-encoded base64 HMAC-SHA1 signature.
    """
    message = canonical_string(tokens)
    digest = hmac.new(
        secret_key.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha1,
    ).digest()
    return encode_value(base64.b64encode(digest).decode("ascii"))


def sign(command: str, query_params: Iterable[Tuple[str, str]], api_key: str, secret_key: str) -> str:
    """
    Compute the signature of a generic API call.

    :param command: Command name, unmodified casing.
    :param query_params: Name/value pairs of the call (including ``response``), not yet encoded.
    :param api_key: The profile's API key.
    :param secret_key: The profile's secret key.
    :return: The signature, ready to append as ``signature=<value>``.
    """
    tokens = [f"apikey={encode_value(api_key)}", f"command={encode_value(command)}"]
    tokens.extend(encode_pairs(query_params))
    return build_signature(tokens, secret_key)
