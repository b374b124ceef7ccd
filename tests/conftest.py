from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from botocore.exceptions import ClientError

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from lakeshare.config import load_settings  # noqa: E402
from lakeshare.resource import CustomResource  # noqa: E402

SHARE_ARN = "arn:aws:ram:us-west-2:111111111111:resource-share/abc"
STACK_ID = "arn:aws:cloudformation:us-west-2:333333333333:stack/sli/6b1c0e70-0000-0000-0000-000000000000"
DATABASE_ARN = "arn:aws:glue:us-west-2:222222222222:database/shared_db"
LAMBDA_ROLE = "arn:aws:iam::333333333333:role/sli-table-permissions"


def client_error(code: str, operation: str = "Operation") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} raised"}}, operation)


def table_arn(name: str, database: str = "shared_db") -> str:
    return f"arn:aws:glue:us-west-2:222222222222:table/{database}/{name}"


class FakeRam:
    def __init__(self, invitations=None, resources=None, accept_error=None, page_size=None):
        self.invitations = invitations or []
        # resource type -> list of arns; None key lists everything
        self.resources = resources or {}
        self.accept_error = accept_error
        self.page_size = page_size
        self.calls: list[tuple[str, dict]] = []

    def get_resource_share_invitations(self, **kwargs):
        self.calls.append(("get_resource_share_invitations", kwargs))
        return {"resourceShareInvitations": self.invitations}

    def accept_resource_share_invitation(self, **kwargs):
        self.calls.append(("accept_resource_share_invitation", kwargs))
        if self.accept_error:
            raise self.accept_error
        return {"resourceShareInvitation": {"status": "ACCEPTED"}}

    def list_resources(self, **kwargs):
        self.calls.append(("list_resources", kwargs))
        rtype = kwargs.get("resourceType")
        if rtype is None:
            arns = [arn for values in self.resources.values() for arn in values]
        else:
            arns = self.resources.get(rtype, [])
        if not self.page_size:
            return {"resources": [{"arn": a} for a in arns]}
        start = int(kwargs.get("nextToken") or 0)
        page = arns[start:start + self.page_size]
        resp = {"resources": [{"arn": a} for a in page]}
        if start + self.page_size < len(arns):
            resp["nextToken"] = str(start + self.page_size)
        return resp

    def called(self, name: str) -> list[dict]:
        return [kwargs for op, kwargs in self.calls if op == name]


class FakeGlue:
    def __init__(self):
        self.databases: dict[str, dict] = {}
        self.calls: list[dict] = []

    def create_database(self, **kwargs):
        self.calls.append(kwargs)
        name = kwargs["DatabaseInput"]["Name"]
        if name in self.databases:
            raise client_error("AlreadyExistsException", "CreateDatabase")
        self.databases[name] = kwargs["DatabaseInput"]
        return {}


class FakeLakeFormation:
    def __init__(self, admins=None, grant_error_for=None):
        self.settings = {
            "DataLakeAdmins": [{"DataLakePrincipalIdentifier": a} for a in (admins or [])],
            "CreateDatabaseDefaultPermissions": [],
        }
        self.grant_error_for = grant_error_for
        self.history: list[dict] = []
        self.grants: list[dict] = []

    def get_data_lake_settings(self, **kwargs):
        return {"DataLakeSettings": dict(self.settings)}

    def put_data_lake_settings(self, **kwargs):
        self.settings = kwargs["DataLakeSettings"]
        self.history.append(self.settings)
        return {}

    def grant_permissions(self, **kwargs):
        principal = kwargs["Principal"]["DataLakePrincipalIdentifier"]
        if principal == self.grant_error_for:
            raise client_error("AccessDeniedException", "GrantPermissions")
        self.grants.append(kwargs)
        return {}

    def admins(self) -> list[str]:
        return [a["DataLakePrincipalIdentifier"] for a in self.settings["DataLakeAdmins"]]


class FakeSsm:
    def __init__(self, existing=None, get_error=None, delete_error=None):
        self.parameters: dict[str, dict] = dict(existing or {})
        self.get_error = get_error
        self.delete_error = delete_error
        self.put_calls: list[dict] = []
        self.delete_calls: list[dict] = []

    def put_parameter(self, **kwargs):
        self.put_calls.append(kwargs)
        if kwargs["Name"] in self.parameters:
            raise client_error("ParameterAlreadyExists", "PutParameter")
        self.parameters[kwargs["Name"]] = kwargs
        return {"Version": 1, "Tier": kwargs.get("Tier")}

    def get_parameter(self, **kwargs):
        if self.get_error:
            raise self.get_error
        if kwargs["Name"] not in self.parameters:
            raise client_error("ParameterNotFound", "GetParameter")
        return {"Parameter": {"Name": kwargs["Name"], "Value": self.parameters[kwargs["Name"]]["Value"]}}

    def delete_parameters(self, **kwargs):
        self.delete_calls.append(kwargs)
        if self.delete_error:
            raise self.delete_error
        deleted = [n for n in kwargs["Names"] if self.parameters.pop(n, None) is not None]
        return {
            "DeletedParameters": deleted,
            "InvalidParameters": [n for n in kwargs["Names"] if n not in deleted],
        }


class FakeClients:
    """Client factory handing out one fake per service and recording the regions asked for."""

    def __init__(self, **fakes):
        self.fakes = fakes
        self.requested: list[tuple[str, str]] = []

    def __call__(self, service: str, region: str):
        self.requested.append((service, region))
        return self.fakes[service]


class RecordingTransport:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.sent: list[tuple[str, bytes, int]] = []

    def __call__(self, url: str, body: bytes, timeout: int) -> None:
        self.sent.append((url, body, timeout))
        if self.error:
            raise self.error


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.delenv("STAGE", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("RESPONSE_TIMEOUT", raising=False)
    monkeypatch.setenv("AWS_REGION", "us-west-2")
    return load_settings()


@pytest.fixture
def context():
    return SimpleNamespace(
        log_group_name="/aws/lambda/sli-custom-resource",
        log_stream_name="2026/10/19/[$LATEST]abcdef0123456789",
    )


@pytest.fixture
def make_event():
    def _make(request_type="Create", **properties):
        event = {
            "RequestType": request_type,
            "ResponseURL": "https://cloudformation-custom-resource-response.example.com/callback",
            "StackId": STACK_ID,
            "RequestId": "req-1",
            "LogicalResourceId": "SliResource",
            "ResourceType": "Custom::SliResource",
            "ResourceProperties": {"ServiceToken": "arn:aws:lambda:us-west-2:333333333333:function:fn"},
        }
        event["ResourceProperties"].update(properties)
        return event

    return _make


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def invoke(settings, context, transport):
    """Run a packaged custom resource against fakes and return the response body."""

    def _invoke(resource: CustomResource, event: dict, clients):
        runner = CustomResource(
            resource.name,
            on_create=resource.on_create,
            on_delete=resource.on_delete,
            client_factory=clients,
            transport=transport,
            settings_loader=lambda: settings,
        )
        return runner(event, context)

    return _invoke
