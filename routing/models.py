"""
Action item routing data models.

ActionItem mirrors the upstream webhook payload fields the router reads,
ReservationData the subset of a Hospitable reservation used in alerts.
Unknown fields are ignored and numeric text fields are read as strings;
no further validation of upstream shapes is done.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ActionItem(BaseModel):
    """A unit of work surfaced by the property-management system"""
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    item_id: Optional[Union[int, str]] = Field(default=None, alias="id")
    item: Optional[str] = None
    category: Optional[str] = None
    property_name: Optional[str] = None
    guest_name: Optional[str] = None
    hospitable_reservation_id: Optional[Union[int, str]] = None
    reservation_id: Optional[Union[int, str]] = None

    @property
    def description(self) -> str:
        return self.item or ""

    @property
    def property_label(self) -> str:
        return self.property_name or ""


class ReservationData(BaseModel):
    """Stay metadata fetched from the reservation lookup"""
    model_config = ConfigDict(extra="ignore", frozen=True)

    # Offsets are kept as delivered; never converted for display
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    platform: Optional[str] = None
    conversation_id: Optional[str] = None


class ResolvePayload(BaseModel):
    """Opaque payload embedded in the resolve button of a default alert"""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    item_id: Optional[Union[int, str]] = None
    property_name: Optional[str] = None
    guest_name: Optional[str] = None
    reservation_id: Optional[Union[int, str]] = None
    item: Optional[str] = None
    category: Optional[str] = None

    @classmethod
    def from_action_item(cls, action_item: ActionItem) -> "ResolvePayload":
        return cls(
            item_id=action_item.item_id,
            property_name=action_item.property_name,
            guest_name=action_item.guest_name,
            reservation_id=action_item.reservation_id,
            item=action_item.item,
            category=action_item.category,
        )
