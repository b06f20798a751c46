"""Exceptions for memoize-codegen."""


class GeneratorError(Exception):
    """Base error for wrapper generation."""

    def __init__(self, message: str, subject: str | None = None, member: str | None = None) -> None:
        self.subject = subject
        self.member = member
        super().__init__(message)


class ValidationError(GeneratorError):
    """A structural precondition of the subject class failed.

    Aborts generation for that one class; no partial wrapper is produced.
    """

    pass


class EmissionError(GeneratorError):
    """The wrapper model could not be rendered into a module or written out."""

    pass
