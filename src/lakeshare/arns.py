"""Parsers for the ARN shapes the handlers consume.

Each parser returns a small frozen value or raises. Input coming from the event is
rejected with ``InvalidInputError``; ARNs discovered through a resource share listing
are provider output, so a mismatch there is an ``ArnParseError``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from lakeshare.errors import ArnParseError, InvalidInputError

PARTITION = r"arn:aws[-\w]{0,10}?"

RESOURCE_SHARE_ARN_RE = re.compile(rf"^{PARTITION}:ram:.+")
RESOURCE_SHARE_REGION_RE = re.compile(rf"^{PARTITION}:ram:([^:]+):([^:]*):.+")
DATABASE_ARN_RE = re.compile(rf"^{PARTITION}:glue:[^:]+:(\d{{12}}):database/(.+)$")
TABLE_ARN_RE = re.compile(rf"^{PARTITION}:glue:[^:]+:(\d{{12}}):table/([^/]+)/(.+)$")
STACK_ARN_RE = re.compile(rf"^{PARTITION}:cloudformation:([^:]+):(\d{{12}}):(.+)$")
ROLE_ARN_RE = re.compile(rf"^{PARTITION}:iam::(\d{{12}}):.+")
REGION_RE = re.compile(r"^[a-z]+(-[a-z]+)+-\d+$")


@dataclass(frozen=True)
class ResourceShareArn:
    arn: str
    region: str
    account_id: str

    def __str__(self) -> str:
        return self.arn


@dataclass(frozen=True)
class DatabaseArn:
    arn: str
    account_id: str
    name: str


@dataclass(frozen=True)
class TableArn:
    arn: str
    account_id: str
    database_name: str
    name: str


@dataclass(frozen=True)
class StackArn:
    arn: str
    region: str
    account_id: str


def validate_region(region: str | None) -> str:
    if not isinstance(region, str) or not REGION_RE.match(region):
        raise InvalidInputError(f"Invalid region: {region}.")
    return region


def parse_resource_share_arn(value) -> ResourceShareArn:
    if not isinstance(value, str) or not RESOURCE_SHARE_ARN_RE.match(value):
        raise InvalidInputError("Invalid ResourceShareArn.")
    captured = RESOURCE_SHARE_REGION_RE.match(value)
    if not captured:
        raise InvalidInputError("Could not parse region from resource share arn.")
    region, account_id = captured.groups()
    return ResourceShareArn(arn=value, region=validate_region(region), account_id=account_id)


def parse_database_arn(value: str) -> DatabaseArn:
    captured = DATABASE_ARN_RE.match(value or "")
    if not captured:
        raise ArnParseError(
            f"Glue database discovered via RAM does not match expected ARN format: {value}."
        )
    account_id, name = captured.groups()
    return DatabaseArn(arn=value, account_id=account_id, name=name)


def parse_table_arn(value: str) -> TableArn:
    captured = TABLE_ARN_RE.match(value or "")
    if not captured:
        raise ArnParseError(f"Could not parse table name from table arn: {value}.")
    account_id, database_name, name = captured.groups()
    return TableArn(arn=value, account_id=account_id, database_name=database_name, name=name)


def parse_stack_arn(value) -> StackArn:
    captured = STACK_ARN_RE.match(value) if isinstance(value, str) else None
    if not captured:
        raise InvalidInputError("Could not parse account id from stack ID.")
    region, account_id, _ = captured.groups()
    return StackArn(arn=value, region=region, account_id=account_id)


def validate_iam_principal(value, account_id: str) -> str:
    """Principals must be IAM identities of ``account_id``."""
    captured = ROLE_ARN_RE.match(value) if isinstance(value, str) else None
    if not captured or captured.group(1) != account_id:
        raise InvalidInputError(
            f"Invalid IAM principal {value}, or IAM principal does not belong to account {account_id}."
        )
    return value
