from fastapi import Request

from querygate.api.services.connection_test_service import ConnectionTestService
from querygate.api.services.profile_store import ProfileStore
from querygate.api.services.query_execution_service import QueryExecutionService


def get_profile_store(request: Request) -> ProfileStore:
    """Get the profile store created at startup."""
    return request.app.state.profile_store


def get_query_execution_service(request: Request) -> QueryExecutionService:
    """Get query execution service."""
    return QueryExecutionService(request.app.state.executor_factory)


def get_connection_test_service(request: Request) -> ConnectionTestService:
    """Get connection test service."""
    return ConnectionTestService(request.app.state.executor_factory)
