"""Accept the RAM invitation that belongs to a resource share."""
from __future__ import annotations

import logging

from botocore.exceptions import ClientError

from lakeshare.arns import ResourceShareArn, parse_resource_share_arn
from lakeshare.clients import ClientFactory, error_code
from lakeshare.config import Settings
from lakeshare.discovery import share_has_resources
from lakeshare.errors import (
    CustomResourceError,
    ExpiredInvitationError,
    InvitationNotFoundError,
    RejectedInvitationError,
)
from lakeshare.resource import CustomResource
from lakeshare.responder import ResourceRequest

LOGGER = logging.getLogger(__name__)

PENDING = "PENDING"
ACCEPTED = "ACCEPTED"
REJECTED = "REJECTED"
EXPIRED = "EXPIRED"

ALREADY_ACCEPTED = "ResourceShareInvitationAlreadyAcceptedException"
ALREADY_REJECTED = "ResourceShareInvitationAlreadyRejectedException"
INVITATION_EXPIRED = "ResourceShareInvitationExpiredException"


def find_invitation(ram, share: ResourceShareArn) -> tuple[str, str | None]:
    """Return ``(status, invitation_arn)`` for ``share``.

    With no invitation on record the share may already have been accepted and the
    invitation cleaned up; a share that lists resources counts as accepted.
    """
    resp = ram.get_resource_share_invitations(resourceShareArns=[share.arn])
    for invitation in resp.get("resourceShareInvitations", []):
        if invitation.get("resourceShareInvitationArn"):
            return invitation.get("status"), invitation["resourceShareInvitationArn"]

    LOGGER.info("Resource share invitation not found, checking whether it has been accepted..")
    if share_has_resources(ram, share):
        return ACCEPTED, None
    raise InvitationNotFoundError("Invalid ResourceShareArn: ResourceShareInvitationArn not found.")


def accept_invitation(ram, invitation_arn: str) -> None:
    LOGGER.info("Accepting invitation %s..", invitation_arn)
    try:
        ram.accept_resource_share_invitation(resourceShareInvitationArn=invitation_arn)
    except ClientError as e:
        code = error_code(e)
        if code == ALREADY_ACCEPTED:
            LOGGER.info("Invitation arn has already been accepted.")
            return
        if code == ALREADY_REJECTED:
            raise RejectedInvitationError("Invitation has already been rejected.") from e
        if code == INVITATION_EXPIRED:
            raise ExpiredInvitationError("Invitation has expired.") from e
        raise


def handle_invitation(ram, status: str, invitation_arn: str | None) -> None:
    LOGGER.info("Invitation status, invitation arn: (%s, %s)", status, invitation_arn)
    if status == PENDING:
        accept_invitation(ram, invitation_arn)
    elif status == ACCEPTED:
        LOGGER.info("Invitation arn has already been accepted.")
    elif status == EXPIRED:
        raise ExpiredInvitationError("Invitation has expired.")
    elif status == REJECTED:
        raise RejectedInvitationError("Invitation has already been rejected.")
    else:
        raise CustomResourceError(f"Unexpected invitation status: {status}.")


def create(request: ResourceRequest, settings: Settings, client_factory: ClientFactory) -> None:
    share = parse_resource_share_arn(request.prop("ResourceShareArn"))
    LOGGER.info("resource share arn: %s, region: %s", share.arn, share.region)
    ram = client_factory("ram", share.region)
    status, invitation_arn = find_invitation(ram, share)
    handle_invitation(ram, status, invitation_arn)


resource = CustomResource("ShareAcceptor", on_create=create)
