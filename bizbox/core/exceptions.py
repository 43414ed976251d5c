"""
Domain errors raised by service modules.

Views turn them into ``{'error': message, ...extra}`` responses with the
carried status code.
"""
from rest_framework import status
from rest_framework.response import Response


class ServiceError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message, status_code=None, **extra):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra

    def to_response(self):
        return Response({'error': self.message, **self.extra}, status=self.status_code)


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ServiceError):
    """The object is in a state that does not allow the operation"""
    status_code = status.HTTP_409_CONFLICT
