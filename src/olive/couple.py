"""
Couple identity and onboarding state.

Shares the key-value storage with the note store but owns different keys.
Storage failures are logged and the in-memory defaults are kept.
"""

import logging

from pydantic import BaseModel, Field, ValidationError

from olive.storage import (
    KEY_COUPLE_NAMES,
    KEY_CURRENT_USER,
    KEY_ONBOARDING,
    Storage,
    StorageError,
)

logger = logging.getLogger(__name__)

DEFAULT_PARTNER1 = "Partner 1"
DEFAULT_PARTNER2 = "Partner 2"

ONBOARDING_COMPLETED = "completed"


class CoupleNames(BaseModel):
    partner1: str = Field(min_length=1)
    partner2: str = Field(min_length=1)


class Couple:
    """The two partners and which of them is using the app right now."""

    def __init__(self, storage: Storage):
        self.storage = storage
        self.partner1 = DEFAULT_PARTNER1
        self.partner2 = DEFAULT_PARTNER2
        self.current_user = ""

    @property
    def active_user(self) -> str:
        """The author to stamp on new notes."""
        return self.current_user or self.partner1

    def load(self) -> None:
        """Read names and current user. The current user defaults to partner 1."""
        try:
            names_data = self.storage.get_item(KEY_COUPLE_NAMES)
            current_user = self.storage.get_item(KEY_CURRENT_USER)

            if names_data:
                names = CoupleNames.model_validate_json(names_data)
                self.partner1, self.partner2 = names.partner1, names.partner2

                if current_user:
                    self.current_user = current_user
                else:
                    self.current_user = self.partner1
                    self.storage.set_item(KEY_CURRENT_USER, self.partner1)
        except (StorageError, ValidationError) as e:
            logger.error(f"Error loading couple data: {e}")

    def save_names(self, partner1: str, partner2: str) -> None:
        names = CoupleNames(partner1=partner1.strip(), partner2=partner2.strip())
        self.partner1, self.partner2 = names.partner1, names.partner2
        if self.current_user not in (self.partner1, self.partner2):
            self.current_user = self.partner1
        try:
            self.storage.set_item(KEY_COUPLE_NAMES, names.model_dump_json())
            self.storage.set_item(KEY_CURRENT_USER, self.current_user)
        except StorageError as e:
            logger.error(f"Error saving couple names: {e}")

    def switch_user(self) -> str:
        """Hand the app to the other partner. Returns the new current user."""
        self.current_user = self.partner2 if self.active_user == self.partner1 else self.partner1
        try:
            self.storage.set_item(KEY_CURRENT_USER, self.current_user)
        except StorageError as e:
            logger.error(f"Error saving current user: {e}")
        return self.current_user


class Onboarding:
    def __init__(self, storage: Storage):
        self.storage = storage
        self.is_onboarded = False

    def load(self) -> None:
        try:
            self.is_onboarded = self.storage.get_item(KEY_ONBOARDING) == ONBOARDING_COMPLETED
        except StorageError as e:
            logger.error(f"Error checking onboarding status: {e}")

    def complete(self) -> None:
        try:
            self.storage.set_item(KEY_ONBOARDING, ONBOARDING_COMPLETED)
            self.is_onboarded = True
        except StorageError as e:
            logger.error(f"Error completing onboarding: {e}")

    def reset(self) -> None:
        """Forget onboarding and the couple's names."""
        try:
            self.storage.remove_items([KEY_ONBOARDING, KEY_COUPLE_NAMES])
            self.is_onboarded = False
        except StorageError as e:
            logger.error(f"Error resetting onboarding: {e}")
