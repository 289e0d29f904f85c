class Error(Exception):
    """Base class of every error raised by this package.

    ``message`` is the engine's error text (or a literal description when the
    engine has none). ``code`` is the engine's extended result code when the
    failure came from an engine call, ``sql`` the statement text if known.
    """

    def __init__(self, message, *, code=None, sql=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.sql = sql

    def __str__(self):
        return self.message


class InterfaceError(Error):
    """A connection or statement was used after it was released."""


class OpenError(Error):
    pass


class PrepareError(Error):
    pass


class BindError(Error):
    pass


class StepError(Error):
    pass


class ResultError(Error):
    pass
