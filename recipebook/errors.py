"""Errors raised by the service layer.

Each error carries the HTTP status it is rendered with; the app turns any
``RecipeBookError`` into a plain-text response with that status.
"""


class RecipeBookError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RecipeBookError):
    status_code = 400


class NotFoundError(RecipeBookError):
    status_code = 404


class UnauthorizedError(RecipeBookError):
    status_code = 401


class ForbiddenError(RecipeBookError):
    status_code = 403


class ConflictError(RecipeBookError):
    status_code = 400
