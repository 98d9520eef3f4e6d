"""Connection profile models."""
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field


class ProfileType(str, Enum):
    """Engine type recorded on a profile."""
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    MONGODB = "mongodb"
    OTHER = "other"


class DatabaseProfile(BaseModel):
    """A named, persisted connection string."""
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    id: str
    name: str
    database_url: str = Field(..., alias="databaseUrl")
    type: Optional[ProfileType] = None
    last_tested: Optional[str] = Field(None, alias="lastTested")
    is_connected: Optional[bool] = Field(None, alias="isConnected")


class ProfileCreate(BaseModel):
    """Request model for creating a profile."""
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    name: str = Field(..., min_length=1, max_length=255)
    database_url: str = Field(..., min_length=1, alias="databaseUrl")
    type: Optional[ProfileType] = None
    last_tested: Optional[str] = Field(None, alias="lastTested")
    is_connected: Optional[bool] = Field(None, alias="isConnected")


class ProfileUpdate(BaseModel):
    """Request model for updating a profile. Omitted fields are left as they are."""
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    name: Optional[str] = None
    database_url: Optional[str] = Field(None, alias="databaseUrl")
    type: Optional[ProfileType] = None
    last_tested: Optional[str] = Field(None, alias="lastTested")
    is_connected: Optional[bool] = Field(None, alias="isConnected")


class ActiveProfileRequest(BaseModel):
    id: str


class ProfileStateResponse(BaseModel):
    """Snapshot of the profile store."""
    model_config = ConfigDict(populate_by_name=True)

    profiles: List[DatabaseProfile]
    active_profile_id: Optional[str] = Field(None, alias="activeProfileId")
    active_profile: Optional[DatabaseProfile] = Field(None, alias="activeProfile")
    has_profiles: bool = Field(..., alias="hasProfiles")
