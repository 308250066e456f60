"""QC workflow errors."""


class QCError(Exception):
    """Base error for QC workflows."""

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.message = message
        self.code = code


class QCValidationError(QCError):
    """Request is well-formed but violates a QC rule."""

    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        super().__init__(message, code)


class DuplicateError(QCError):
    """A uniqueness rule was violated."""

    def __init__(self, message: str, code: str = "DUPLICATE"):
        super().__init__(message, code)
