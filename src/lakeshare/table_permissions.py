"""Grant Lake Formation SELECT on every shared table to a list of principals.

Lake Formation only lets a data lake administrator grant on a resource it does not
own, so the executing role adds itself to ``DataLakeAdmins`` for the duration of the
grants and removes itself afterwards. The target principals stay administrators.
"""
from __future__ import annotations

import logging

from lakeshare.arns import parse_resource_share_arn, parse_stack_arn, validate_iam_principal
from lakeshare.clients import ClientFactory
from lakeshare.config import Settings
from lakeshare.discovery import find_shared_database
from lakeshare.errors import InvalidInputError
from lakeshare.resource import CustomResource
from lakeshare.responder import ResourceRequest

LOGGER = logging.getLogger(__name__)

ADMINS = "DataLakeAdmins"
PRINCIPAL_ID = "DataLakePrincipalIdentifier"
TABLE_PERMISSIONS = ["SELECT"]


def read_principals(request: ResourceRequest) -> list[str]:
    principals = request.prop("LakeFormationPrincipals")
    if not isinstance(principals, list) or not principals:
        raise InvalidInputError("LakeFormationPrincipals must be a non-empty list.")
    account_id = parse_stack_arn(request.stack_id).account_id
    LOGGER.info("Account id: %s", account_id)
    for principal in principals:
        validate_iam_principal(principal, account_id)
    unique = list(dict.fromkeys(principals))
    LOGGER.info("LakeFormation principals: %s", unique)
    return unique


def read_executor(request: ResourceRequest) -> str:
    executor = request.prop("LambdaRoleArn")
    account_id = parse_stack_arn(request.stack_id).account_id
    validate_iam_principal(executor, account_id)
    LOGGER.info("Current caller: %s", executor)
    return executor


def with_admins(settings: dict, principals: list[str]) -> dict:
    """Return a copy of ``settings`` whose admins also include ``principals``."""
    existing = [a[PRINCIPAL_ID] for a in settings.get(ADMINS, [])]
    merged = list(dict.fromkeys(existing + list(principals)))
    return {**settings, ADMINS: [{PRINCIPAL_ID: p} for p in merged]}


def grant_select_on_all_tables(lakeformation, database_name: str, principals: list[str]) -> None:
    for principal in principals:
        LOGGER.info("Granting %s on %s.* to %s", TABLE_PERMISSIONS, database_name, principal)
        lakeformation.grant_permissions(
            Principal={PRINCIPAL_ID: principal},
            Resource={"Table": {"DatabaseName": database_name, "TableWildcard": {}}},
            Permissions=TABLE_PERMISSIONS,
        )


def grant_with_temporary_admin(lakeformation, database_name: str, principals: list[str],
                               executor: str) -> dict:
    """Grant table access while ``executor`` is briefly a data lake administrator.

    Lake Formation offers no lock on the data lake settings. Between the read below
    and each of the two writes, a concurrent writer's changes are silently lost
    (last write wins). A failure after the first write leaves ``executor`` in the
    admin list; nothing here rolls that back.

    Returns the settings left in place: the original admins plus ``principals``.
    """
    current = lakeformation.get_data_lake_settings()["DataLakeSettings"]
    desired = with_admins(current, principals)
    elevated = with_admins(desired, [executor])

    LOGGER.info("Adding %s and LakeFormation principals into DataLakeAdmins...", executor)
    lakeformation.put_data_lake_settings(DataLakeSettings=elevated)
    grant_select_on_all_tables(lakeformation, database_name, principals)
    LOGGER.info("Permission granted. Removing %s from DataLakeAdmins...", executor)
    lakeformation.put_data_lake_settings(DataLakeSettings=desired)
    return desired


def create(request: ResourceRequest, settings: Settings, client_factory: ClientFactory) -> None:
    LOGGER.info("Start attaching Lake Formation permissions..")
    share = parse_resource_share_arn(request.prop("ResourceShareArn"))
    principals = read_principals(request)
    executor = read_executor(request)

    ram = client_factory("ram", settings.region)
    lakeformation = client_factory("lakeformation", settings.region)
    database = find_shared_database(ram, share)
    grant_with_temporary_admin(lakeformation, database.name, principals, executor)


resource = CustomResource("TablePermissionGranter", on_create=create)
