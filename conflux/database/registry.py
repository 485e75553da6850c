"""
Project registry ORM
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, Relationship, SQLModel

from conflux.core.registry import PersonData, ProjectData, ProjectRoleData
from conflux.core.uuid import UUID, uuid7


class ProjectMembership(SQLModel, table=True):
    """
    A record of a person contributing to a project.
    """

    __tablename__ = "project_membership"

    project_id: Optional[UUID] = Field(
        primary_key=True, foreign_key="project.project_id", ondelete="CASCADE"
    )
    person_id: Optional[UUID] = Field(
        primary_key=True, foreign_key="person.person_id", ondelete="CASCADE"
    )


class RoleAssignment(SQLModel, table=True):
    """
    A record of a person holding a project role.
    """

    __tablename__ = "role_assignment"

    role_id: Optional[UUID] = Field(
        primary_key=True, foreign_key="project_role.role_id", ondelete="CASCADE"
    )
    person_id: Optional[UUID] = Field(
        primary_key=True, foreign_key="person.person_id", ondelete="CASCADE"
    )


class Person(SQLModel, table=True):
    __tablename__ = "person"

    person_id: UUID = Field(primary_key=True, default_factory=uuid7)

    name: str
    scim_id: str | None = Field(default=None, unique=True)

    projects: list["Project"] = Relationship(
        back_populates="people", link_model=ProjectMembership
    )
    roles: list["ProjectRole"] = Relationship(
        back_populates="people", link_model=RoleAssignment
    )

    def to_core(self) -> PersonData:
        return PersonData(
            person_id=self.person_id, name=self.name, scim_id=self.scim_id
        )


class ProjectRole(SQLModel, table=True):
    """
    A role within a project, backed by one of the collaboration's SRAM
    sub-groups.
    """

    __tablename__ = "project_role"

    role_id: UUID = Field(primary_key=True, default_factory=uuid7)
    project_id: UUID = Field(foreign_key="project.project_id", ondelete="CASCADE")

    name: str
    description: str | None = None
    urn: str = Field(unique=True)
    scim_id: str

    project: "Project" = Relationship(back_populates="roles")
    people: list[Person] = Relationship(
        back_populates="roles",
        link_model=RoleAssignment,
        sa_relationship_kwargs=dict(lazy="selectin"),
    )

    def to_core(self) -> ProjectRoleData:
        return ProjectRoleData(
            role_id=self.role_id,
            project_id=self.project_id,
            name=self.name,
            description=self.description,
            urn=self.urn,
            scim_id=self.scim_id,
            people=[person.to_core() for person in self.people],
        )


class Project(SQLModel, table=True):
    __tablename__ = "project"

    project_id: UUID = Field(primary_key=True, default_factory=uuid7)

    title: str
    description: str | None = None
    scim_id: str | None = Field(default=None, unique=True)
    start_date: datetime | None = Field(
        sa_column=Column(DateTime(timezone=True)), default=None
    )

    people: list[Person] = Relationship(
        back_populates="projects",
        link_model=ProjectMembership,
        sa_relationship_kwargs=dict(lazy="selectin"),
    )
    roles: list[ProjectRole] = Relationship(
        back_populates="project",
        sa_relationship_kwargs=dict(lazy="selectin", cascade="all, delete-orphan"),
    )

    def to_core(self) -> ProjectData:
        """
        Convert this Project ORM object to a ProjectData core object.
        """
        return ProjectData(
            project_id=self.project_id,
            title=self.title,
            description=self.description,
            scim_id=self.scim_id,
            start_date=self.start_date,
            people=[person.to_core() for person in self.people],
            roles=[role.to_core() for role in self.roles],
        )
