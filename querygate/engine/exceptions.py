"""Errors raised by the query engine.

Each error carries the HTTP status the API layer answers with.
"""


class QueryEngineError(Exception):
    """Base class for query proxy failures."""

    status_code = 500


class MissingParameterError(QueryEngineError):
    """A required request field was empty or absent."""

    status_code = 400


class UnsupportedDatabaseError(QueryEngineError):
    """The connection string scheme is not one we can dispatch."""


class DriverUnavailableError(QueryEngineError):
    """The driver library for an engine is not installed."""


class InvalidQueryError(QueryEngineError):
    """The query text could not be interpreted for the target engine."""

    status_code = 400
