"""Create a local resource-link database pointing at the shared Glue database."""
from __future__ import annotations

import logging

from botocore.exceptions import ClientError

from lakeshare.arns import DatabaseArn, parse_resource_share_arn
from lakeshare.clients import ClientFactory, error_code
from lakeshare.config import Settings
from lakeshare.discovery import find_shared_database
from lakeshare.resource import CustomResource
from lakeshare.responder import ResourceRequest

LOGGER = logging.getLogger(__name__)

ALREADY_EXISTS = "AlreadyExistsException"


def create_database_link(glue, database: DatabaseArn) -> None:
    """Create ``database.name`` locally, targeting the same name in the owner's catalog."""
    try:
        glue.create_database(
            DatabaseInput={
                "Name": database.name,
                "TargetDatabase": {
                    "CatalogId": database.account_id,
                    "DatabaseName": database.name,
                },
            }
        )
        LOGGER.info("Successfully created database %s", database.name)
    except ClientError as e:
        if error_code(e) != ALREADY_EXISTS:
            raise
        LOGGER.info("Database %s already exists", database.name)


def create(request: ResourceRequest, settings: Settings, client_factory: ClientFactory) -> str:
    share = parse_resource_share_arn(request.prop("ResourceShareArn"))
    LOGGER.info("Extracted resource share arn from event: %s", share.arn)
    ram = client_factory("ram", settings.region)
    glue = client_factory("glue", settings.region)

    database = find_shared_database(ram, share)
    create_database_link(glue, database)
    return database.name


def delete(request: ResourceRequest, settings: Settings, client_factory: ClientFactory) -> str | None:
    # The link is left in place; the shared catalog namespace outlives the stack.
    LOGGER.info("Leaving database %s in place.", request.physical_resource_id)
    return request.physical_resource_id


resource = CustomResource("CatalogDatabaseProvisioner", on_create=create, on_delete=delete)
