class QueryViewError(Exception):
    pass


class TransportFailure(QueryViewError):
    """Raised by a query source when the collection could not be fetched.

    The view model absorbs this error: the previously fetched data is kept and
    the next poll acts as the retry.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class MalformedRecordError(QueryViewError):
    """A record from the coordinator could not be decoded"""


class UnitParseError(QueryViewError, ValueError):
    """A duration or data size string could not be parsed"""


class ConfigurationError(QueryViewError):
    pass
