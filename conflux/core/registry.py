"""
Core registry data models, for projects synchronised from SRAM.
"""

from datetime import datetime

from pydantic import BaseModel

from conflux.core.uuid import UUID


class PersonData(BaseModel):
    person_id: UUID
    name: str
    scim_id: str | None


class ProjectRoleData(BaseModel):
    role_id: UUID
    project_id: UUID
    name: str
    description: str | None
    urn: str
    scim_id: str
    people: list[PersonData]


class ProjectData(BaseModel):
    project_id: UUID
    title: str
    description: str | None
    scim_id: str | None
    start_date: datetime | None
    people: list[PersonData]
    roles: list[ProjectRoleData]
