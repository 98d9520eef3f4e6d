"""Connectivity checks for connection strings."""
import time
import logging
from typing import Optional

from querygate.api.models.database import ConnectionTestResponse
from querygate.engine.database_connection_schema import DatabaseType, classify_database_url, sanitize_url
from querygate.engine.exceptions import MissingParameterError
from querygate.engine.query_factory import QueryExecutorFactory


logger = logging.getLogger(__name__)


class ConnectionTestService:
    """Probes a database without running a caller-supplied query."""

    def __init__(self, executor_factory: QueryExecutorFactory):
        self.executor_factory = executor_factory

    def test_connection(self, database_url: Optional[str]) -> ConnectionTestResponse:
        """
        Connect, run a trivial probe and disconnect.

        Only a missing connection string raises; every other failure is
        reported in the returned response with ``success=False``.
        """
        if not database_url:
            raise MissingParameterError("databaseUrl is required")

        start_time = time.time()
        db_type = classify_database_url(database_url)

        try:
            executor = self.executor_factory.create_executor(db_type)
            details = executor.test_connection(database_url)
            connection_time_ms = (time.time() - start_time) * 1000

            details["latencyMs"] = round(connection_time_ms, 2)
            return ConnectionTestResponse(
                success=True,
                type=db_type.value,
                message=f"Successfully connected to {db_type.value} database",
                details=details
            )

        except Exception as e:
            logger.error(f"Database connection test error for {sanitize_url(database_url)}: {str(e)}")
            return ConnectionTestResponse(
                success=False,
                type=db_type.value if db_type != DatabaseType.UNKNOWN else None,
                message=str(e) or "Failed to connect to database",
                error=repr(e)
            )
