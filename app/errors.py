# app/errors.py


class DataAccessError(Exception):
    """
    The database could not serve a read or write.

    The message is safe to show to end users: it never contains SQL, bind
    parameters or connection details. The underlying driver error is logged
    where it is caught and kept as ``__cause__``.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
