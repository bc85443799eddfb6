"""Signed URLs for the console proxy endpoint."""

from cloudstack_client.api.signer import build_signature, encode_pairs, encode_value
from cloudstack_client.models.profile import ConnectionProfile


def build_console_url(profile: ConnectionProfile, vm_id: str) -> str:
    """
    Build ``/client/console?cmd=access&vm=<id>&apikey=..&signature=..``.

    The signature covers ``cmd``, ``vm`` and ``apikey`` using the same
    algorithm as any API call.
    """
    tokens = encode_pairs([("cmd", "access"), ("vm", vm_id)])
    tokens.append(f"apikey={encode_value(profile.api_key)}")
    signature = build_signature(tokens, profile.secret_key)
    return f"{profile.console_url}?{'&'.join(tokens)}&signature={signature}"
