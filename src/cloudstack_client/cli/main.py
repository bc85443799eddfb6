import argparse
import sys
import warnings
from typing import List, Optional

from cloudstack_client import __version__
from cloudstack_client.cli.console import print_error, print_json, print_success, print_table, print_warning
from cloudstack_client.database.json_profile_store import JSONProfileStore
from cloudstack_client.exceptions import CloudStackClientError, JobTimeoutWarning
from cloudstack_client.helpers.logger import setup_logging
from cloudstack_client.helpers.utils import load_json_data, parse_key_value_args
from cloudstack_client.models.profile import ConnectionProfile
from cloudstack_client.models.results import ErrorResult
from cloudstack_client.session import CloudStackSession


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cloudstack-client",
        description="Call any command of a CloudStack-compatible management server.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-p", "--profile", help="Connection profile name (defaults to DEFAULT_PROFILE).")
    parser.add_argument("--profiles-file", help="Path to the JSON profile store.")

    subparsers = parser.add_subparsers(dest="action", required=True)

    profile_parser = subparsers.add_parser("profile", help="Manage connection profiles.")
    profile_sub = profile_parser.add_subparsers(dest="profile_action", required=True)

    add_parser = profile_sub.add_parser("add", help="Add or update a profile.")
    add_parser.add_argument("name")
    add_parser.add_argument("--server", required=True)
    add_parser.add_argument("--api-key", required=True)
    add_parser.add_argument("--secret-key", required=True)
    add_parser.add_argument("--secure-port", type=int, default=8443)
    add_parser.add_argument("--unsecure-port", type=int, default=8080)
    add_parser.add_argument("--use-ssl", action="store_true")
    add_parser.add_argument("--update", action="store_true", help="Replace an existing profile.")

    remove_parser = profile_sub.add_parser("remove", help="Remove a profile.")
    remove_parser.add_argument("name")

    profile_sub.add_parser("list", help="List profiles.")

    apis_parser = subparsers.add_parser("apis", help="List the commands offered by the server.")
    apis_parser.add_argument("--filter", help="Only show commands whose name contains this text.")

    call_parser = subparsers.add_parser("call", help="Call a command.")
    call_parser.add_argument("command")
    call_parser.add_argument("args", nargs="*", help="Arguments as name=value.")
    call_parser.add_argument("--data", help="Arguments as a JSON object.")
    call_parser.add_argument("-f", "--file", help="Path to a JSON file with arguments.")
    wait_group = call_parser.add_mutually_exclusive_group()
    wait_group.add_argument("--wait", type=int, help="Wait budget for async jobs, in poll intervals.")
    wait_group.add_argument("--no-wait", action="store_true", help="Return immediately if the job is pending.")

    return parser


def _handle_profile(args, store: JSONProfileStore) -> int:
    if args.profile_action == "list":
        print_table(
            "Connection profiles",
            ["Name", "Server", "SSL", "Port"],
            [(p.name, p.server, p.use_ssl, p.port) for p in store.list_profiles()],
        )
        return 0

    if args.profile_action == "remove":
        store.remove_profile(args.name)
        print_success(f"Profile '{args.name}' removed.")
        return 0

    profile = ConnectionProfile(
        name=args.name,
        server=args.server,
        api_key=args.api_key,
        secret_key=args.secret_key,
        secure_port=args.secure_port,
        unsecure_port=args.unsecure_port,
        use_ssl=args.use_ssl,
    )
    if args.update:
        store.update_profile(profile)
    else:
        store.add_profile(profile)
    print_success(f"Profile '{args.name}' saved.")
    return 0


def _handle_call(args, session: CloudStackSession) -> int:
    call_args = {}
    if args.data or args.file:
        call_args.update(load_json_data(json_str=args.data, json_file=args.file))
    call_args.update(parse_key_value_args(args.args))

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", JobTimeoutWarning)
        result = session.call(args.command, call_args, wait=args.wait, no_wait=args.no_wait)
    for warning in caught:
        print_warning(str(warning.message))

    print_json(result.to_dict())
    return 1 if isinstance(result, ErrorResult) else 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the cloudstack-client command line.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logger = setup_logging("cloudstack_client.cli")

    try:
        store = JSONProfileStore(args.profiles_file)
        if args.action == "profile":
            return _handle_profile(args, store)

        with CloudStackSession.open(args.profile, store) as session:
            session.load_catalog()
            if args.action == "apis":
                commands = [
                    c for c in session.commands()
                    if not args.filter or args.filter.lower() in c.name.lower()
                ]
                print_table(
                    "Commands",
                    ["Name", "Async", "Description"],
                    [(c.name, c.is_async, c.description) for c in commands],
                )
                return 0
            return _handle_call(args, session)

    except CloudStackClientError as e:
        logger.error("Command failed", error=e.message, error_code=e.error_code)
        print_error(e.message)
        return 2
    except ValueError as e:
        print_error(str(e))
        return 2


def cli_main() -> None:
    """Entry point function for console scripts."""
    sys.exit(main())


if __name__ == "__main__":
    cli_main()
