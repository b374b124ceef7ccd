"""Discovery of shared catalog resources through a RAM resource share listing.

The shared database and tables live in another account and are never addressed
directly; the share is the only way to learn their ARNs.
"""
from __future__ import annotations

import logging

from lakeshare.arns import DatabaseArn, ResourceShareArn, parse_database_arn, parse_table_arn
from lakeshare.errors import NoResourceFoundError

LOGGER = logging.getLogger(__name__)

RESOURCE_OWNER = "OTHER-ACCOUNTS"
DATABASE_TYPE = "glue:database"
TABLE_TYPE = "glue:table"


def list_shared_resource_arns(ram, share: ResourceShareArn,
                              resource_type: str | None = None) -> list[str]:
    arns, token = [], None
    while True:
        kwargs = {
            "resourceOwner": RESOURCE_OWNER,
            "resourceShareArns": [share.arn],
        }
        if resource_type:
            kwargs["resourceType"] = resource_type
        if token:
            kwargs["nextToken"] = token
        resp = ram.list_resources(**kwargs)
        for r in resp.get("resources", []):
            arn = r.get("arn")
            if arn:
                arns.append(arn)
        token = resp.get("nextToken")
        if not token:
            break
    return arns


def share_has_resources(ram, share: ResourceShareArn) -> bool:
    return bool(list_shared_resource_arns(ram, share))


def find_shared_database(ram, share: ResourceShareArn) -> DatabaseArn:
    """Return the database exposed by ``share``.

    A share is expected to carry a single database; when several come back the
    first one listed wins.
    """
    arns = list_shared_resource_arns(ram, share, DATABASE_TYPE)
    if not arns:
        raise NoResourceFoundError("Found no database associated with resource share ARN.")
    if len(arns) > 1:
        LOGGER.warning("Resource share exposes %d databases, using %s", len(arns), arns[0])
    database = parse_database_arn(arns[0])
    LOGGER.info("Database name: %s (owner %s)", database.name, database.account_id)
    return database


def find_shared_table_names(ram, share: ResourceShareArn) -> list[str]:
    arns = list_shared_resource_arns(ram, share, TABLE_TYPE)
    if not arns:
        raise NoResourceFoundError("Found no table associated with resource share ARN.")
    names = [parse_table_arn(arn).name for arn in arns]
    LOGGER.info("Table names: %s", names)
    return names
