"""API routes for proxying queries to user-supplied databases."""
from fastapi import APIRouter, Depends, HTTPException
import logging

from querygate.api.dependencies import get_connection_test_service, get_query_execution_service
from querygate.api.models.database import (
    QueryRequest,
    QueryResponse,
    ConnectionTestRequest,
    ConnectionTestResponse
)
from querygate.api.services.connection_test_service import ConnectionTestService
from querygate.api.services.query_execution_service import QueryExecutionService
from querygate.engine.exceptions import MissingParameterError, QueryEngineError


router = APIRouter(prefix="/database", tags=["database"])
logger = logging.getLogger(__name__)


@router.post("/query", response_model=QueryResponse)
def query_database(
    request: QueryRequest,
    service: QueryExecutionService = Depends(get_query_execution_service)
):
    """
    Execute a query against the database a connection string points at.

    With ``demoMode`` set, sample rows are returned and no connection is made.
    """
    try:
        result = service.execute_query(
            request.database_url,
            request.query,
            demo_mode=request.demo_mode,
            collection=request.collection
        )

    except QueryEngineError as e:
        logger.error(f"Database query error: {str(e)}")
        raise HTTPException(status_code=e.status_code, detail=str(e))

    except Exception as e:
        logger.error(f"Database query error: {str(e)}")
        raise HTTPException(
            status_code=getattr(e, "status_code", None) or 500,
            detail=str(e) or "Failed to execute query"
        )

    return QueryResponse(
        success=True,
        data=result.data,
        count=result.rows_returned,
        demo_mode=result.demo_mode,
        message=result.message,
        type=result.db_type,
        execution_time_ms=result.execution_time_ms
    )


@router.post("/testConnection", response_model=ConnectionTestResponse)
def test_database_connection(
    request: ConnectionTestRequest,
    service: ConnectionTestService = Depends(get_connection_test_service)
):
    """Check that a connection string can be connected to, without running a query."""
    try:
        return service.test_connection(request.database_url)
    except MissingParameterError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
