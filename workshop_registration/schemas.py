from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Slot(str, Enum):
    MORNING = "12:30 - 2:30 PM"
    AFTERNOON = "3:30 - 5:30 PM"

    @property
    def key(self) -> str:
        # name used in the slotsFull flags
        return self.name.lower()


class RegistrationIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # all optional here, blanks are rejected by the service with a 400
    name: Optional[str] = None
    email: Optional[str] = None
    contact: Optional[str] = None
    is_affiliated: Optional[bool] = Field(default=False, alias="isAffiliated")
    affiliation_id: Optional[str] = Field(default=None, alias="affiliationId")
    slot: Optional[str] = None


class SlotsFull(BaseModel):
    morning: bool = False
    afternoon: bool = False
