"""
Local learning and user services
"""
from typing import Any, Mapping, Optional

from loguru import logger
from pydantic import ValidationError

from lucid.models import LearningRecord, ServiceResponse, UserProfile, merge_fields
from lucid.services.base import KeyValueStorage, describe_error


class LocalLearningService:
    """Learning records kept in a key-value storage"""

    def __init__(self, storage: KeyValueStorage[LearningRecord]):
        self.storage = storage

    async def get_records(self) -> ServiceResponse:
        try:
            return ServiceResponse.ok(await self.storage.get_all())
        except Exception as e:
            logger.exception(f"Error loading learning records: {e}")
            return ServiceResponse.fail(describe_error(e, "Failed to load learning records"))

    async def add_record(self, record: LearningRecord) -> ServiceResponse:
        try:
            await self.storage.save(record.id, record)
            logger.info(f"Recorded {record.action} of node {record.node_id} ({record.duration} min)")
            return ServiceResponse.ok(record)
        except Exception as e:
            logger.exception(f"Error saving learning record: {e}")
            return ServiceResponse.fail(describe_error(e, "Failed to save learning record"))


class LocalUserService:
    """Single-user profile storage; login stores the profile locally"""

    def __init__(self, storage: KeyValueStorage[UserProfile]):
        self.storage = storage
        self.current_user_id: Optional[str] = None

    async def login(self, profile: UserProfile) -> ServiceResponse:
        try:
            existing = await self.storage.get(profile.id)
            if existing is None:
                await self.storage.save(profile.id, profile)
            self.current_user_id = profile.id
            logger.info(f"User logged in: {profile.name}")
            return ServiceResponse.ok(profile)
        except Exception as e:
            logger.exception(f"Error logging in: {e}")
            return ServiceResponse.fail(describe_error(e, "Login failed"))

    async def logout(self) -> ServiceResponse:
        logger.info(f"User logged out: {self.current_user_id}")
        self.current_user_id = None
        return ServiceResponse.ok()

    async def update_profile(self, user_id: str, fields: Mapping[str, Any]) -> ServiceResponse:
        try:
            profile = await self.storage.get(user_id)
            if profile is None:
                return ServiceResponse.fail(f"User not found: {user_id}")
            updated = merge_fields(profile, fields)
            await self.storage.save(user_id, updated)
            return ServiceResponse.ok(updated)
        except (KeyError, ValidationError) as e:
            return ServiceResponse.fail(f"Invalid profile update: {e}")
        except Exception as e:
            logger.exception(f"Error updating profile {user_id}: {e}")
            return ServiceResponse.fail(describe_error(e, "Failed to update profile"))
