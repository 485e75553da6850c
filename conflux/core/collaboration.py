"""
Core collaboration data models.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CollaborationRequest(BaseModel):
    """
    A collaboration (and the sub-groups within it) asserted by the identity
    provider, still to be resolved against the group directory.
    """

    model_config = ConfigDict(frozen=True)

    organization: str
    collaboration_name: str
    group_ids: list[str] = []


class GroupMember(BaseModel):
    display_name: str
    scim_id: str


class GroupRecord(BaseModel):
    # The human oriented identifier, i.e. the directory's URN suffix
    id: str
    urn: str
    display_name: str
    description: str | None = None
    url: str | None = None
    logo_url: str | None = None
    external_id: str
    # The directory identifier; this is what the URN cache stores
    scim_id: str
    created: datetime | None = None
    members: list[GroupMember] = []


class Collaboration(BaseModel):
    organization: str
    collaboration_group: GroupRecord
    groups: list[GroupRecord]
