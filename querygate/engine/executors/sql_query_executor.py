"""SQL query executor using SQLAlchemy for PostgreSQL and MySQL."""
import time
import logging
from typing import Dict, Any, List, Optional
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

from querygate.engine.interfaces import QueryExecutorInterface
from querygate.engine.database_connection_schema import sanitize_url
from querygate.engine.serialization import to_jsonable


logger = logging.getLogger(__name__)


class SQLQueryExecutor(QueryExecutorInterface):
    """
    Executes SQL queries using SQLAlchemy.

    Every call builds its own engine without pooling and disposes of it
    before returning, so no connection outlives the request.
    """

    # Map connection string schemes to SQLAlchemy dialect+driver prefixes
    dialect_map = {
        'postgres://': 'postgresql+psycopg2://',
        'postgresql://': 'postgresql+psycopg2://',
        'mysql://': 'mysql+pymysql://',
    }

    def execute_query(
        self,
        database_url: str,
        query: str,
        collection: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Execute the literal SQL text and return the rows as dictionaries."""
        start_time = time.time()
        engine = self._create_engine(database_url)

        try:
            logger.info(f"Executing SQL query on {sanitize_url(database_url)}: {query[:100]}...")
            with engine.begin() as connection:
                # no_parameters keeps the driver from treating '%' as a placeholder
                result = connection.execution_options(no_parameters=True).exec_driver_sql(query)

                rows = []
                if result.returns_rows:
                    for row in result:
                        rows.append(to_jsonable(dict(row._mapping)))

            execution_time_ms = (time.time() - start_time) * 1000
            logger.info(f"Query executed successfully. Rows: {len(rows)}, Time: {execution_time_ms:.2f}ms")
            return rows

        except Exception as e:
            logger.error(f"SQL execution error: {str(e)}")
            raise

        finally:
            engine.dispose()

    def test_connection(self, database_url: str) -> Dict[str, Any]:
        """Test database connection."""
        engine = self._create_engine(database_url)

        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return {"database": engine.url.database, "dialect": engine.dialect.name}

        finally:
            engine.dispose()

    def _create_engine(self, database_url: str) -> Engine:
        """Create a single-use SQLAlchemy engine."""
        return create_engine(
            self._build_connection_string(database_url),
            poolclass=NullPool,
            connect_args={"connect_timeout": self.connect_timeout_seconds},
            echo=False
        )

    def _build_connection_string(self, database_url: str) -> str:
        """Rewrite the scheme so SQLAlchemy picks the installed driver."""
        for scheme, dialect in self.dialect_map.items():
            if database_url.startswith(scheme):
                return dialect + database_url[len(scheme):]
        return database_url
