"""Publish the share coordinates as SSM parameters for downstream query tooling."""
from __future__ import annotations

import logging
import re

from botocore.exceptions import ClientError

from lakeshare.arns import parse_resource_share_arn, validate_region
from lakeshare.clients import ClientFactory, error_code
from lakeshare.config import ParameterDefinition, Settings
from lakeshare.discovery import find_shared_database, find_shared_table_names
from lakeshare.errors import InvalidInputError, ParameterAlreadyExistsError
from lakeshare.resource import CustomResource
from lakeshare.responder import ResourceRequest

LOGGER = logging.getLogger(__name__)

# Write order; the stack id goes first so a collision can name its owner.
PARAMETER_KEYS = ["stackId", "resourceShareArn", "athenaResultBucket", "databaseName", "tableNames"]

PARAMETER_ALREADY_EXISTS = "ParameterAlreadyExists"
PARAMETER_TIER = "Standard"


def read_home_region(request: ResourceRequest) -> str:
    region = validate_region(request.prop("DTRegion"))
    LOGGER.info("Detective region: %s", region)
    return region


def read_matching(request: ResourceRequest, prop: str, definition: ParameterDefinition,
                  label: str) -> str:
    value = request.prop(prop)
    if not isinstance(value, str) or not re.search(definition.allowed_pattern, value):
        raise InvalidInputError(f"Invalid {label}.")
    LOGGER.info("%s: %s", label, value)
    return value


def find_occupying_stack(ssm, settings: Settings) -> str | None:
    """Best-effort lookup of the stack id already published; None on any provider error."""
    try:
        resp = ssm.get_parameter(Name=settings.parameter("stackId").name)
    except ClientError:
        LOGGER.warning("Could not read the existing stack id parameter", exc_info=True)
        return None
    return resp.get("Parameter", {}).get("Value")


def save_parameter(ssm, settings: Settings, definition: ParameterDefinition, value: str) -> None:
    LOGGER.info("Saving parameter %s...", definition.name)
    try:
        ssm.put_parameter(
            Name=definition.name,
            Description=definition.description,
            Value=value,
            Type=definition.type,
            AllowedPattern=definition.allowed_pattern,
            Tier=PARAMETER_TIER,
        )
    except ClientError as e:
        if error_code(e) != PARAMETER_ALREADY_EXISTS:
            raise
        stack_id = find_occupying_stack(ssm, settings)
        if stack_id:
            message = (
                f"SSM Parameter {definition.name} already exists, another stack with stack ID "
                f"{stack_id} created by this template already exists, please delete it first."
            )
        else:
            message = (
                f"SSM Parameter {definition.name} already exists, another stack created by this "
                "template could already exist, please delete the existing stack before creating a new one."
            )
        raise ParameterAlreadyExistsError(message) from e


def create(request: ResourceRequest, settings: Settings, client_factory: ClientFactory) -> None:
    LOGGER.info("Creating parameters..")
    share = parse_resource_share_arn(request.prop("ResourceShareArn"))
    home_region = read_home_region(request)
    bucket = read_matching(request, "AthenaResultsBucket",
                           settings.parameter("athenaResultBucket"), "bucket name")
    stack_id = read_matching(request, "StackId", settings.parameter("stackId"), "stackId")

    ram = client_factory("ram", share.region)
    database = find_shared_database(ram, share)
    table_names = find_shared_table_names(ram, share)

    values = {
        "stackId": stack_id,
        "resourceShareArn": share.arn,
        "athenaResultBucket": bucket,
        "databaseName": database.name,
        "tableNames": ",".join(table_names),
    }
    ssm = client_factory("ssm", home_region)
    for key in PARAMETER_KEYS:
        save_parameter(ssm, settings, settings.parameter(key), values[key])


def delete(request: ResourceRequest, settings: Settings, client_factory: ClientFactory) -> None:
    names = [settings.parameter(key).name for key in PARAMETER_KEYS]
    LOGGER.info("Deleting parameters %s..", names)
    ssm = client_factory("ssm", read_home_region(request))
    resp = ssm.delete_parameters(Names=names)
    if resp and resp.get("InvalidParameters"):
        LOGGER.info("Parameters not present: %s", resp["InvalidParameters"])


resource = CustomResource("ParameterPublisher", on_create=create, on_delete=delete)
