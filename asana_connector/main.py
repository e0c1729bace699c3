"""
Command line entry point of the Asana access connector.

    asana-connector validate
    asana-connector sync [--output FILE]
    asana-connector grant  --entitlement-id "team:<gid>:Team Member" --user-id <gid>
    asana-connector revoke --entitlement-id "workspace:<gid>:Member" --user-id <gid>

The token is read from --token or ASANA_TOKEN (a .env file is honoured).
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

import httpx  # type: ignore
from pydantic import ValidationError

from asana_connector.config.connector_config import AsanaConnectorConfig
from asana_connector.connectors.core.sync.sync_runner import SyncRunner
from asana_connector.connectors.sources.asana.connector import AsanaConnector
from asana_connector.connectors.sources.asana.resources import (
    RESOURCE_TYPE_USER,
    new_resource_id,
)
from asana_connector.exceptions.connector_exceptions import (
    AsanaConnectorError,
    ResourceValidationError,
)
from asana_connector.models.resource import (
    ENTITLEMENT_ID_SEPARATOR,
    Entitlement,
    Resource,
    ResourceId,
    ResourceTrait,
    new_grant,
    new_permission_entitlement,
)
from asana_connector.utils.logger import create_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="asana-connector", description="Asana access connector")
    parser.add_argument("--token", help="Asana API token (defaults to ASANA_TOKEN)")
    parser.add_argument("--base-url", help="Asana API base URL")
    parser.add_argument("--page-size", type=int, help="Page size for list calls")
    parser.add_argument("--log-level", default=None, help="Logging level (defaults to LOG_LEVEL or INFO)")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("validate", help="Check the token and list allowed workspaces")

    sync = subparsers.add_parser("sync", help="Dump resources, entitlements and grants as JSON")
    sync.add_argument("--output", help="Write to this file instead of stdout")

    for name in ("grant", "revoke"):
        cmd = subparsers.add_parser(name, help=f"{name.capitalize()} a workspace or team role")
        cmd.add_argument("--entitlement-id", required=True, help="resourceType:resourceId:role")
        cmd.add_argument("--user-id", required=True, help="Asana user gid")

    return parser


def entitlement_from_id(entitlement_id: str) -> Entitlement:
    parts = entitlement_id.split(ENTITLEMENT_ID_SEPARATOR)
    if len(parts) != 3:
        raise ResourceValidationError(f"invalid entitlement id: {entitlement_id}")
    resource_type, resource_id, slug = parts
    resource = Resource(
        id=ResourceId(resource_type=resource_type, resource=resource_id),
        display_name=resource_id,
        trait=ResourceTrait.GROUP,
    )
    return new_permission_entitlement(resource, slug, display_name=slug)


def user_principal(user_id: str) -> Resource:
    return Resource(
        id=new_resource_id(RESOURCE_TYPE_USER, user_id),
        display_name=user_id,
        trait=ResourceTrait.USER,
    )


async def run_command(args: argparse.Namespace, config: AsanaConnectorConfig) -> int:
    logger = create_logger("asana_connector", args.log_level)

    async with AsanaConnector.build_from_config(config, logger) as connector:
        allowed = await connector.validate()
        runner = SyncRunner(connector.resource_syncers(), logger)

        if args.command == "validate":
            print(json.dumps({"allowed_workspaces": sorted(allowed)}, indent=2))
        elif args.command == "sync":
            snapshot = await runner.run()
            payload = snapshot.model_dump_json(indent=2)
            if args.output:
                with open(args.output, "w", encoding="utf-8") as f:
                    f.write(payload)
            else:
                print(payload)
        elif args.command == "grant":
            entitlement = entitlement_from_id(args.entitlement_id)
            provisioner = runner.provisioner(entitlement.resource.id.resource_type, "grant")
            grants = await provisioner.grant(user_principal(args.user_id), entitlement)
            print(json.dumps([g.id for g in grants], indent=2))
        elif args.command == "revoke":
            entitlement = entitlement_from_id(args.entitlement_id)
            provisioner = runner.provisioner(entitlement.resource.id.resource_type, "revoke")
            grant = new_grant(
                entitlement.resource,
                entitlement.slug,
                new_resource_id(RESOURCE_TYPE_USER, args.user_id),
                entitlement=entitlement,
            )
            await provisioner.revoke(grant)
            print(json.dumps({"revoked": grant.id}, indent=2))

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = AsanaConnectorConfig.from_env(
            token=args.token,
            base_url=args.base_url,
            page_size=args.page_size,
        )
    except ValidationError as e:
        print(f"invalid configuration: {e}", file=sys.stderr)
        return 2

    try:
        return asyncio.run(run_command(args, config))
    except AsanaConnectorError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 1
    except httpx.HTTPError as e:
        print(f"error: request to Asana failed: {e}", file=sys.stderr)
        return 1
