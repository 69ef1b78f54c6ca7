"""
Service-layer error taxonomy.

Every service function raises one of these instead of returning error codes.
The API layer maps each kind to its own HTTP status and caller-facing title
(see ``apps.api.exceptions``); store error text never reaches the caller.
"""

from django.core.exceptions import ValidationError as DjangoValidationError


class ServiceError(Exception):
    """Base class for all errors raised by the service layer."""

    status_code = 400
    code = 'error'
    title = 'Request failed'
    default_message = 'The request could not be completed.'

    def __init__(self, message=None, *, field_errors=None):
        self.message = message or self.default_message
        self.field_errors = field_errors or {}
        super().__init__(self.message)

    def as_dict(self):
        data = {
            'error': self.title,
            'code': self.code,
            'status_code': self.status_code,
            'message': self.message,
        }
        if self.field_errors:
            data['fields'] = self.field_errors
        return data

    @classmethod
    def from_django(cls, exc: DjangoValidationError):
        """Build a ValidationError from Django's ``full_clean`` output."""
        if hasattr(exc, 'error_dict'):
            fields = {name: [str(m) for m in messages] for name, messages in exc.message_dict.items()}
            first = next(iter(fields.values()))[0] if fields else None
            return ValidationError(first, field_errors=fields)
        return ValidationError('; '.join(exc.messages))


class ValidationError(ServiceError):
    """Malformed or missing input. Nothing was changed."""

    status_code = 400
    code = 'validation_error'
    title = 'Invalid request'
    default_message = 'The submitted data is invalid.'


class NotFoundError(ServiceError):
    """A referenced complaint, remark, technician or notification does not exist."""

    status_code = 404
    code = 'not_found'
    title = 'Resource not found'
    default_message = 'The requested resource does not exist.'


class ForbiddenError(ServiceError):
    """The actor's role or ownership does not allow the operation."""

    status_code = 403
    code = 'forbidden'
    title = 'Access forbidden'
    default_message = 'You do not have permission to perform this action.'


class ConflictError(ServiceError):
    """The complaint's current state does not allow the operation."""

    status_code = 409
    code = 'conflict'
    title = 'Conflict'
    default_message = 'The complaint cannot be changed in its current state.'


class DependencyError(ServiceError):
    """An external collaborator (attachment store) failed."""

    status_code = 503
    code = 'dependency_error'
    title = 'Service unavailable'
    default_message = 'A required service is temporarily unavailable. Please try again later.'
