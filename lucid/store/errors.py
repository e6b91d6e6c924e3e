"""
Store error types

Every error carries an ``ErrorKind`` so command results can report what went wrong.
"""
from lucid.models import ErrorKind


class StoreError(Exception):
    kind = ErrorKind.SERVICE_FAILURE


class EntityNotFoundError(StoreError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, kind_name: str, entity_id: str):
        self.kind_name = kind_name
        self.entity_id = entity_id
        super().__init__(f"{kind_name} not found: {entity_id}")


class DuplicateEntityError(StoreError):
    kind = ErrorKind.VALIDATION_FAILURE

    def __init__(self, kind_name: str, entity_id: str):
        self.kind_name = kind_name
        self.entity_id = entity_id
        super().__init__(f"{kind_name} already exists: {entity_id}")


class EntityValidationError(StoreError):
    kind = ErrorKind.VALIDATION_FAILURE


class InvalidStateError(StoreError):
    kind = ErrorKind.INVALID_STATE


class ServiceFailureError(StoreError):
    kind = ErrorKind.SERVICE_FAILURE
