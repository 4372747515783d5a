# /clinic/utils/errors.py
"""Domain error taxonomy.

Every error is detected locally and returned to the caller; nothing here is
retried. Each error carries enough context (entity, field, offending value)
to explain the rejection and maps to an HTTP status for the API layer.
"""


class ClinicError(Exception):
    """Base class for all business-rule violations."""
    status_code = 400
    error_type = 'clinic_error'

    def __init__(self, message, entity=None, field=None, value=None):
        super().__init__(message)
        self.message = message
        self.entity = entity
        self.field = field
        self.value = value

    def to_dict(self):
        payload = {'error': self.message, 'type': self.error_type}
        if self.entity:
            payload['entity'] = self.entity
        if self.field:
            payload['field'] = self.field
        if self.value is not None:
            payload['value'] = str(self.value)
        return payload


class ValidationError(ClinicError):
    """Malformed or out-of-range input, detected before any write."""
    status_code = 400
    error_type = 'validation_error'


class NotFoundError(ClinicError):
    """A referenced entity does not exist."""
    status_code = 404
    error_type = 'not_found'

    def __init__(self, entity, entity_id, field=None):
        super().__init__(f"{entity} {entity_id} not found", entity=entity, field=field, value=entity_id)


class ConflictError(ClinicError):
    """Uniqueness violation, e.g. double-booking or a duplicate email."""
    status_code = 409
    error_type = 'conflict'


class NoAvailabilityError(ClinicError):
    """No active schedule slot covers the requested date and time."""
    status_code = 409
    error_type = 'no_availability'


class InvalidTransitionError(ClinicError):
    """Status change not allowed by the workflow."""
    status_code = 409
    error_type = 'invalid_transition'


class ImmutableRecordError(ClinicError):
    """Attempt to modify a write-once record."""
    status_code = 409
    error_type = 'immutable_record'
