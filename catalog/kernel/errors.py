"""
Domain errors raised by the kernel and workflow services.

The API layer translates these into HTTP responses (see catalog.main).
"""


class CatalogError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(CatalogError):
    """A project, user or notification does not exist (or is not the caller's)."""

    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class WorkflowError(CatalogError):
    """An approval workflow operation was refused. The project is unchanged."""


class UnauthorizedTransitionError(WorkflowError):
    """The actor may not approve or reject this project."""


class InvalidSupervisorError(WorkflowError):
    """The designated supervisor holds neither the SUPERVISOR nor ADMIN role."""


class MissingSupervisorError(WorkflowError):
    """A non-admin submitted a project without naming a supervisor."""


class PermissionDeniedError(CatalogError):
    """The caller may not modify this resource (e.g. someone else's comment)."""
