"""Interface for query executors across different data sources."""
from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional
from dataclasses import dataclass


@dataclass
class QueryExecutionResult:
    """Container for query execution results."""
    data: List[Dict[str, Any]]
    rows_returned: int
    execution_time_ms: float
    demo_mode: bool = False
    message: Optional[str] = None
    db_type: Optional[str] = None


class QueryExecutorInterface(ABC):
    """
    Abstract interface for query executors.

    Implementations open a connection for the duration of a single call and
    release it before returning, whether the call succeeds or fails.
    """

    def __init__(self, connect_timeout_seconds: int = 5):
        self.connect_timeout_seconds = connect_timeout_seconds

    @abstractmethod
    def execute_query(
        self,
        database_url: str,
        query: str,
        collection: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Execute a query against the data source.

        Args:
            database_url: Connection string of the target database
            query: The query text to execute
            collection: Collection name, for data sources that have them

        Returns:
            Result rows in the order the driver produced them
        """
        pass

    @abstractmethod
    def test_connection(self, database_url: str) -> Dict[str, Any]:
        """
        Open a connection, run a trivial probe and close it again.

        Args:
            database_url: Connection string of the target database

        Returns:
            Details about the probed server

        Raises:
            Exception: Whatever the driver raised when the probe failed
        """
        pass
