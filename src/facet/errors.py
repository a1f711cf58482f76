"""Errors raised by the template engine."""


class TemplateError(Exception):

    """Base class for all template errors."""

    def __init__(self, message, name=None, lineno=None):
        """Initializes the TemplateError."""
        super(TemplateError, self).__init__(message)
        self.message = message
        self.name = name
        self.lineno = lineno

    def __str__(self):
        """Returns the message, along with the template location if known."""
        if self.name is None:
            return self.message
        if self.lineno is None:
            return "{} [{}]".format(self.message, self.name)
        return "{} [{}, line {}]".format(self.message, self.name, self.lineno)


class TemplateCompileError(TemplateError):

    """A template could not be compiled."""


class TemplateDoesNotExist(TemplateError):

    """A named template could not be found."""


class RenderTypeError(TemplateError, TypeError):

    """A rendered object does not support the requested operation."""
