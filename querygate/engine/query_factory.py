"""Factory for creating query executors based on database type."""
import importlib
import importlib.util
import logging
from dataclasses import dataclass
from typing import Dict, List

from querygate.engine.database_connection_schema import DatabaseType
from querygate.engine.exceptions import DriverUnavailableError, UnsupportedDatabaseError
from querygate.engine.interfaces import QueryExecutorInterface


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DriverSpec:
    """Where an engine's executor lives and which library it needs."""
    label: str
    driver_module: str
    package: str
    executor_path: str


DRIVERS: Dict[DatabaseType, DriverSpec] = {
    DatabaseType.POSTGRESQL: DriverSpec(
        label="PostgreSQL",
        driver_module="psycopg2",
        package="psycopg2-binary",
        executor_path="querygate.engine.executors.sql_query_executor:SQLQueryExecutor",
    ),
    DatabaseType.MYSQL: DriverSpec(
        label="MySQL",
        driver_module="pymysql",
        package="pymysql",
        executor_path="querygate.engine.executors.sql_query_executor:SQLQueryExecutor",
    ),
    DatabaseType.MONGODB: DriverSpec(
        label="MongoDB",
        driver_module="pymongo",
        package="pymongo",
        executor_path="querygate.engine.executors.mongodb_query_executor:MongoDBQueryExecutor",
    ),
}


def driver_installed(module_name: str) -> bool:
    return importlib.util.find_spec(module_name) is not None


class QueryExecutorFactory:
    """
    Creates query executors for the database types whose drivers are present.

    The registry is built once, when the factory is constructed. Asking for an
    engine whose driver was missing at that point raises
    ``DriverUnavailableError`` with the install command.
    """

    def __init__(
        self,
        connect_timeout_seconds: int = 5,
        mongo_result_limit: int = 1000,
        drivers: Dict[DatabaseType, DriverSpec] = None
    ):
        self.connect_timeout_seconds = connect_timeout_seconds
        self.mongo_result_limit = mongo_result_limit
        self.drivers = drivers if drivers is not None else DRIVERS
        self._registry: Dict[DatabaseType, type] = {}

        for db_type, spec in self.drivers.items():
            if not driver_installed(spec.driver_module):
                logger.warning(
                    f"{spec.label} driver '{spec.driver_module}' not installed; "
                    f"{db_type.value} connections are disabled"
                )
                continue
            self._registry[db_type] = self._load_executor_class(spec.executor_path)
            logger.info(f"Registered {spec.label} executor")

    def create_executor(self, db_type: DatabaseType) -> QueryExecutorInterface:
        """
        Create appropriate query executor based on database type.

        Args:
            db_type: Type of database (from DatabaseType enum)

        Returns:
            QueryExecutorInterface implementation

        Raises:
            UnsupportedDatabaseError: If the database type is not supported
            DriverUnavailableError: If the driver for the type is not installed
        """
        spec = self.drivers.get(db_type)
        if spec is None:
            raise UnsupportedDatabaseError("Unsupported database type")

        executor_class = self._registry.get(db_type)
        if executor_class is None:
            raise DriverUnavailableError(
                f"{spec.label} support requires the {spec.package} library. "
                f"Install with: pip install {spec.package}"
            )

        if db_type == DatabaseType.MONGODB:
            return executor_class(
                connect_timeout_seconds=self.connect_timeout_seconds,
                result_limit=self.mongo_result_limit
            )
        return executor_class(connect_timeout_seconds=self.connect_timeout_seconds)

    def get_supported_databases(self) -> List[DatabaseType]:
        """Database types with an installed driver."""
        return list(self._registry)

    @staticmethod
    def _load_executor_class(executor_path: str) -> type:
        module_name, class_name = executor_path.split(":")
        return getattr(importlib.import_module(module_name), class_name)
