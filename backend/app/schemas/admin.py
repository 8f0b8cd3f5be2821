"""Schemas for the admin back office."""
from pydantic import BaseModel


class CreatorApprovalUpdate(BaseModel):
    """Approve (True) or revoke (False) a creator."""

    creator_id: str
    status: bool


class AdminDashboardResponse(BaseModel):
    total_creators: int
    approved_creators: int
    pending_creators: int
    total_posters: int
    pending_posters: int
    approved_posters: int
    pending_payouts: int
    new_support_messages: int
