from typing import Any, Callable

import boto3

ClientFactory = Callable[[str, str], Any]


def build_client(service: str, region: str):
    """Create a boto3 client for ``service`` pinned to ``region``."""
    return boto3.client(service, region_name=region)


def error_code(exc) -> str:
    """Return the provider error code carried by a botocore ``ClientError``."""
    return exc.response.get("Error", {}).get("Code", "")
