"""Failure taxonomy shared by the provisioning handlers.

Every error raised on a create path ends up as the Reason of a FAILED response.
Provider errors (``botocore.exceptions.ClientError``) are not wrapped.
"""


class CustomResourceError(Exception):
    """Base class for failures detected by the handlers themselves."""


class InvalidInputError(CustomResourceError):
    """A resource property or the event envelope is malformed."""


class UnsupportedOperationError(CustomResourceError):
    pass


class NoResourceFoundError(CustomResourceError):
    """The resource share exposes nothing of the requested type."""


class ArnParseError(CustomResourceError):
    """An ARN returned by a provider does not have the expected shape."""


class ExpiredInvitationError(CustomResourceError):
    pass


class RejectedInvitationError(CustomResourceError):
    pass


class InvitationNotFoundError(CustomResourceError):
    pass


class ParameterAlreadyExistsError(CustomResourceError):
    """A named parameter owned by this workflow is already taken."""
