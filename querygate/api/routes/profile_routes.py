"""API routes for connection profile management."""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, status
import logging

from querygate.api.dependencies import get_connection_test_service, get_profile_store
from querygate.api.models.database import ConnectionTestResponse
from querygate.api.models.profile import (
    ActiveProfileRequest,
    DatabaseProfile,
    ProfileCreate,
    ProfileStateResponse,
    ProfileUpdate
)
from querygate.api.services.connection_test_service import ConnectionTestService
from querygate.api.services.profile_store import ProfileStore


router = APIRouter(prefix="/database/profiles", tags=["profiles"])
logger = logging.getLogger(__name__)


def profile_state(store: ProfileStore) -> ProfileStateResponse:
    return ProfileStateResponse(
        profiles=store.profiles,
        active_profile_id=store.active_profile_id,
        active_profile=store.active_profile,
        has_profiles=store.has_profiles
    )


@router.get("", response_model=ProfileStateResponse)
def get_profiles(store: ProfileStore = Depends(get_profile_store)):
    """Get all profiles and the active selection."""
    return profile_state(store)


@router.post("", response_model=DatabaseProfile, status_code=status.HTTP_201_CREATED)
def create_profile(profile: ProfileCreate, store: ProfileStore = Depends(get_profile_store)):
    """Create a profile. The first profile created becomes the active one."""
    return store.add_profile(**profile.model_dump())


@router.put("/active", response_model=ProfileStateResponse)
def set_active_profile(request: ActiveProfileRequest, store: ProfileStore = Depends(get_profile_store)):
    """Select the active profile."""
    if not store.set_active_profile(request.id):
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile_state(store)


@router.patch("/{profile_id}", response_model=DatabaseProfile)
def update_profile(
    profile_id: str,
    update_data: ProfileUpdate,
    store: ProfileStore = Depends(get_profile_store)
):
    """Update the supplied fields of a profile."""
    profile = store.update_profile(profile_id, **update_data.model_dump(exclude_unset=True))
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.delete("/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_profile(profile_id: str, store: ProfileStore = Depends(get_profile_store)):
    """Delete a profile."""
    if not store.delete_profile(profile_id):
        raise HTTPException(status_code=404, detail="Profile not found")


@router.post("/{profile_id}/test", response_model=ConnectionTestResponse)
def test_profile_connection(
    profile_id: str,
    store: ProfileStore = Depends(get_profile_store),
    service: ConnectionTestService = Depends(get_connection_test_service)
):
    """Test a profile's connection and record the outcome on the profile."""
    profile = store.get_profile(profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")

    result = service.test_connection(profile.database_url)
    store.update_profile(
        profile_id,
        last_tested=datetime.now(timezone.utc).isoformat(),
        is_connected=result.success
    )
    logger.info(f"Connection test for profile {profile_id}: {'ok' if result.success else 'failed'}")
    return result
