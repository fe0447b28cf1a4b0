#!/usr/bin/env python3
# CUI // SP-CTI
"""cloudhouse CLI — inspect resolved cloud configuration.

Usage:
    cloudhouse resolve --cloud mycloud --json
    cloudhouse auth --cloud mycloud
    cloudhouse endpoint --cloud mycloud --service volume --region eu-de

Secrets (passwords, tokens, keys) are masked in every output.
"""

import argparse
import dataclasses
import json
import logging
import sys
from typing import Any, List, Optional

from cloudhouse.config.credentials import resolve_client_config
from cloudhouse.config.endpoints import SERVICES, endpoint_options
from cloudhouse.config.models import ClientOpts
from cloudhouse.config.resolver import CloudConfigResolver
from cloudhouse.resilience.correlation import CorrelationLogFilter
from cloudhouse.resilience.errors import CloudHouseError
from cloudhouse.settings import load_settings

logger = logging.getLogger("cloudhouse.cli")

SECRET_FIELDS = frozenset({
    "password", "token", "token_id", "secret_key", "access_key",
    "application_credential_secret",
})
MASK = "******"


def mask_secrets(value: Any) -> Any:
    """Return a copy of ``value`` with non-empty secret fields masked."""
    if isinstance(value, dict):
        return {
            k: (MASK if k in SECRET_FIELDS and v else mask_secrets(v))
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [mask_secrets(v) for v in value]
    return value


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] [%(correlation_id)s] %(levelname)s: %(message)s",
    )
    for handler in logging.getLogger().handlers:
        handler.addFilter(CorrelationLogFilter())


def _print_result(result: dict, json_output: bool):
    if json_output:
        print(json.dumps(result, indent=2, default=str))
        return
    for key, value in result.items():
        if isinstance(value, dict):
            print(f"{key}:")
            for sub_key, sub_value in value.items():
                if sub_value not in ("", None):
                    print(f"  {sub_key}: {sub_value}")
        elif value not in ("", None, []):
            print(f"{key}: {value}")


def _client_opts(args) -> ClientOpts:
    return ClientOpts(
        cloud=args.cloud or "",
        env_prefix=args.env_prefix,
        region_name=getattr(args, "region", "") or "",
        endpoint_type=getattr(args, "interface", "") or "",
    )


def cmd_resolve(args) -> dict:
    resolver = CloudConfigResolver(env_prefix=args.env_prefix)
    descriptor = resolver.resolve(args.cloud or "")
    return descriptor.to_dict()


def cmd_auth(args) -> dict:
    _, auth = resolve_client_config(_client_opts(args))
    result = dataclasses.asdict(auth)
    result["auth_style"] = auth.auth_style
    return result


def cmd_endpoint(args) -> dict:
    opts = _client_opts(args)
    descriptor, _ = resolve_client_config(opts)
    return dataclasses.asdict(endpoint_options(args.service, descriptor, opts))


COMMANDS = {
    "resolve": cmd_resolve,
    "auth": cmd_auth,
    "endpoint": cmd_endpoint,
}


def run_cli(argv: Optional[List[str]] = None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="cloudhouse: layered OpenStack cloud configuration"
    )

    # Common args shared by all subcommands
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--json", action="store_true", dest="json_output",
                        help="JSON output")
    common.add_argument("--cloud", default="",
                        help="Cloud entry name (default: <PREFIX>CLOUD)")
    common.add_argument("--env-prefix", default="",
                        help="Environment variable prefix (default from settings, OS_)")
    common.add_argument("--verbose", "-v", action="store_true",
                        help="Debug logging")

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("resolve", parents=[common],
                   help="Print the resolved cloud descriptor")

    auth = sub.add_parser("auth", parents=[common],
                          help="Print assembled authentication parameters")
    auth.add_argument("--region", help="Region override")

    endpoint = sub.add_parser("endpoint", parents=[common],
                              help="Print endpoint options for a service")
    endpoint.add_argument("--service", required=True, choices=SERVICES,
                          help="Service type")
    endpoint.add_argument("--region", help="Region override")
    endpoint.add_argument("--interface", help="public, internal or admin")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    _configure_logging(args.verbose)
    if not args.env_prefix:
        args.env_prefix = load_settings().env_prefix

    try:
        result = COMMANDS[args.command](args)
    except CloudHouseError as exc:
        logger.debug("%s failed", args.command, exc_info=True)
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    _print_result(mask_secrets(result), args.json_output)


if __name__ == "__main__":
    run_cli()
