"""Domain error taxonomy.

Every error carries the HTTP status it maps to; the handlers registered in
create_app render them with the same {"error": {status, title, detail}} shape
used for werkzeug HTTPExceptions.
"""
from __future__ import annotations
from typing import Optional


class WorkshopError(Exception):
    status_code = 500
    title = 'Internal Server Error'

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.title)
        self.detail = detail or self.title

    def to_dict(self):
        return {
            'error': {
                'status': self.status_code,
                'title': self.title,
                'detail': self.detail,
            }
        }


class InfrastructureError(WorkshopError):
    """Storage unreachable or a query failed."""
    status_code = 500
    title = 'Internal Server Error'


class TransientStorageError(InfrastructureError):
    """Connection pool exhausted; the caller may retry with backoff."""
    status_code = 503
    title = 'Service Unavailable'
    retry_after = 1


class NotFoundError(WorkshopError):
    status_code = 404
    title = 'Not Found'


class ValidationError(WorkshopError):
    status_code = 400
    title = 'Bad Request'


class AuthorizationDenied(WorkshopError):
    status_code = 403
    title = 'Forbidden'

    def __init__(self, detail: Optional[str] = None):
        # Never reveal which flag or list caused the denial
        super().__init__('Not permitted')


__all__ = [
    'WorkshopError', 'InfrastructureError', 'TransientStorageError',
    'NotFoundError', 'ValidationError', 'AuthorizationDenied',
]
