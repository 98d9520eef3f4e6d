"""Query execution service."""
import time
import logging
from typing import Optional

from querygate.engine.database_connection_schema import DatabaseType, classify_database_url, sanitize_url
from querygate.engine.demo_data import DEMO_MESSAGE, get_demo_rows
from querygate.engine.exceptions import MissingParameterError
from querygate.engine.interfaces import QueryExecutionResult
from querygate.engine.query_factory import QueryExecutorFactory
from querygate.engine.serialization import to_jsonable


logger = logging.getLogger(__name__)


class QueryExecutionService:
    """Service for executing queries against user-supplied databases."""

    def __init__(self, executor_factory: QueryExecutorFactory):
        self.executor_factory = executor_factory

    def execute_query(
        self,
        database_url: Optional[str],
        query: Optional[str],
        demo_mode: bool = False,
        collection: Optional[str] = None
    ) -> QueryExecutionResult:
        """
        Execute a query against the database the connection string points at.

        Flow:
        1. Reject empty connection string or query
        2. In demo mode, return the canned sample rows without any I/O
        3. Classify the connection string and get the executor for its engine
        4. Run the query on a connection opened and closed for this call

        Raises:
            MissingParameterError: If databaseUrl or query is empty
            UnsupportedDatabaseError: If the scheme is not recognised
            DriverUnavailableError: If the engine's driver is not installed
            InvalidQueryError: If a MongoDB filter is not a JSON object
        """
        if not database_url or not query:
            raise MissingParameterError("databaseUrl and query are required")

        start_time = time.time()
        db_type = classify_database_url(database_url)
        reported_type = db_type.value if db_type != DatabaseType.UNKNOWN else None

        if demo_mode:
            rows = get_demo_rows(db_type)
            return QueryExecutionResult(
                data=rows,
                rows_returned=len(rows),
                execution_time_ms=round((time.time() - start_time) * 1000, 2),
                demo_mode=True,
                message=DEMO_MESSAGE,
                db_type=reported_type
            )

        logger.info(f"Executing {db_type.value} query against {sanitize_url(database_url)}")
        executor = self.executor_factory.create_executor(db_type)
        # Executors convert their own driver types; anything left is stringified
        rows = to_jsonable(executor.execute_query(database_url, query, collection=collection))

        return QueryExecutionResult(
            data=rows,
            rows_returned=len(rows),
            execution_time_ms=round((time.time() - start_time) * 1000, 2),
            demo_mode=False,
            db_type=reported_type
        )
