class ZenPlanError(Exception):
    """Base class for planner errors."""


class MalformedLocalData(ZenPlanError, ValueError):
    """Local storage held a payload that is not a valid collection."""


class RemoteUnavailable(ZenPlanError, RuntimeError):
    """The document store could not be reached or answered with an error."""


class InvalidMutationInput(ZenPlanError, ValueError):
    pass


class RoleChangeRejected(ZenPlanError, PermissionError):
    pass
