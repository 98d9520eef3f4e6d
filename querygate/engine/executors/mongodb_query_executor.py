"""MongoDB query executor for equality-filter queries."""
import time
import json
import logging
from typing import Dict, Any, List, Optional
from bson import ObjectId, json_util
from bson.json_util import RELAXED_JSON_OPTIONS
from pymongo import MongoClient

from querygate.engine.interfaces import QueryExecutorInterface
from querygate.engine.database_connection_schema import sanitize_url
from querygate.engine.exceptions import InvalidQueryError, QueryEngineError
from querygate.engine.serialization import to_jsonable


logger = logging.getLogger(__name__)

DEFAULT_DATABASE_NAME = "test"


class MongoDBQueryExecutor(QueryExecutorInterface):
    """
    Executes MongoDB find() queries.

    The query text is a JSON document used as the find filter. A client is
    created per call and closed before returning.
    """

    def __init__(self, connect_timeout_seconds: int = 5, result_limit: int = 1000):
        super().__init__(connect_timeout_seconds)
        self.result_limit = result_limit

    def execute_query(
        self,
        database_url: str,
        query: str,
        collection: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Run find(filter) on the requested or first collection."""
        start_time = time.time()
        query_filter = self._parse_filter(query)

        client = self._create_client(database_url)
        try:
            db = client.get_default_database(default=DEFAULT_DATABASE_NAME)

            collection_name = collection
            if not collection_name:
                collection_names = db.list_collection_names()
                if not collection_names:
                    raise QueryEngineError("No collections found in database")
                collection_name = collection_names[0]

            logger.info(f"Executing MongoDB query on {db.name}.{collection_name}")
            cursor = db[collection_name].find(query_filter).limit(self.result_limit)
            documents = self._serialize_documents(list(cursor))

            execution_time_ms = (time.time() - start_time) * 1000
            logger.info(f"MongoDB query executed successfully. Documents: {len(documents)}, Time: {execution_time_ms:.2f}ms")
            return documents

        except QueryEngineError:
            raise

        except Exception as e:
            logger.error(f"MongoDB execution error: {str(e)}")
            raise

        finally:
            client.close()

    def test_connection(self, database_url: str) -> Dict[str, Any]:
        """Test MongoDB connection."""
        client = self._create_client(database_url)
        try:
            client.admin.command('ping')
            return {"database": client.get_default_database(default=DEFAULT_DATABASE_NAME).name}
        finally:
            client.close()

    def _parse_filter(self, query: str) -> Dict[str, Any]:
        """Parse the query text as a JSON equality filter."""
        try:
            query_filter = json.loads(query)
        except json.JSONDecodeError as e:
            raise InvalidQueryError(
                f'MongoDB query must be valid JSON format, e.g., {{"status": "active"}} ({e.msg})'
            ) from e

        if not isinstance(query_filter, dict):
            raise InvalidQueryError(
                'MongoDB query must be a JSON object, e.g., {"status": "active"}'
            )
        return query_filter

    def _create_client(self, database_url: str) -> MongoClient:
        """Create MongoDB client."""
        logger.debug(f"Creating MongoDB client for {sanitize_url(database_url)}")
        timeout_ms = self.connect_timeout_seconds * 1000
        return MongoClient(
            database_url,
            serverSelectionTimeoutMS=timeout_ms,
            connectTimeoutMS=timeout_ms
        )

    def _serialize_documents(self, documents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Serialize MongoDB documents to JSON-compatible format."""
        return [to_jsonable(document, fallback=serialize_bson_value) for document in documents]


def serialize_bson_value(value: Any) -> Any:
    """ObjectIds become hex strings; other BSON types use relaxed extended JSON."""
    if isinstance(value, ObjectId):
        return str(value)
    try:
        return json.loads(json_util.dumps(value, json_options=RELAXED_JSON_OPTIONS))
    except TypeError:
        return str(value)
