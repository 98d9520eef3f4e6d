"""Request and response models for the database proxy endpoints."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any, List


class QueryRequest(BaseModel):
    """Request model for proxying a query.

    Fields are optional here so that missing values reach the service and
    are rejected with a 400 instead of a validation error.
    """
    model_config = ConfigDict(populate_by_name=True)

    database_url: Optional[str] = Field(None, alias="databaseUrl")
    query: Optional[str] = None
    demo_mode: bool = Field(False, alias="demoMode")
    collection: Optional[str] = None


class QueryResponse(BaseModel):
    """Response model for a proxied query."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    data: List[Dict[str, Any]]
    count: int
    demo_mode: bool = Field(..., alias="demoMode")
    message: Optional[str] = None
    type: Optional[str] = None
    execution_time_ms: Optional[float] = Field(None, alias="executionTimeMs")


class ConnectionTestRequest(BaseModel):
    """Request model for testing a connection string."""
    model_config = ConfigDict(populate_by_name=True)

    database_url: Optional[str] = Field(None, alias="databaseUrl")


class ConnectionTestResponse(BaseModel):
    """Response model for connection test."""
    success: bool
    type: Optional[str] = None
    message: str
    details: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
