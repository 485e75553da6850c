"""
Service layer for the project registry. Projects, their people and their
roles are kept in step with the SRAM collaborations they come from.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog.typing import FilteringBoundLogger

from conflux.core.collaboration import Collaboration, GroupMember, GroupRecord
from conflux.core.urn import directory_urn
from conflux.core.uuid import UUID
from conflux.database.registry import Person, Project, ProjectRole

from .collaborations import GroupNotFound, map_scim_group
from .directory import GroupDirectory


class ProjectNotFound(Exception):
    pass


async def read_by_id(
    project_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> Project:
    """
    Read a project by its ID.

    Raises
    ------
    ProjectNotFound
        If the project does not exist.
    """
    log = log.bind(project_id=project_id)
    project = await conn.get(Project, project_id)

    if project is None:
        await log.ainfo("project.not_found")
        raise ProjectNotFound(f"Project with id {project_id} not found")

    await log.adebug("project.found")
    return project


async def read_project_by_scim_id(
    scim_id: str,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> Project:
    """
    Read the project backed by the SRAM collaboration group `scim_id`.

    Raises
    ------
    ProjectNotFound
        If no project is backed by that group.
    """
    log = log.bind(scim_id=scim_id)
    result = await conn.execute(select(Project).where(Project.scim_id == scim_id))
    project = result.scalar_one_or_none()

    if project is None:
        await log.ainfo("project.not_found")
        raise ProjectNotFound(f"Project with SCIM id {scim_id} not found")

    await log.adebug("project.found")
    return project


async def _person_for_member(member: GroupMember, conn: AsyncSession) -> Person:
    result = await conn.execute(select(Person).where(Person.scim_id == member.scim_id))
    person = result.scalar_one_or_none()

    if person is None:
        person = Person(name=member.display_name, scim_id=member.scim_id)
        conn.add(person)
        await conn.flush()

    return person


async def _add_members(
    project: Project, group: GroupRecord, conn: AsyncSession
) -> int:
    added = 0

    for member in group.members:
        person = await _person_for_member(member, conn)

        if person not in project.people:
            project.people.append(person)
            added += 1

    return added


async def _people_for_group(group: GroupRecord, conn: AsyncSession) -> list[Person]:
    return [await _person_for_member(member, conn) for member in group.members]


async def _assign_role(
    role: ProjectRole, group: GroupRecord, conn: AsyncSession
) -> ProjectRole:
    """
    Rebuild the holders of an existing `role` from the current members of
    its group.
    """
    people = await _people_for_group(group, conn)

    # The old holders must be loaded before the collection can be replaced.
    await conn.refresh(role, attribute_names=["people"])

    role.name = group.display_name
    role.description = group.description
    role.scim_id = group.scim_id
    role.people = people
    return role


async def _upsert_role(
    project: Project, group: GroupRecord, conn: AsyncSession
) -> ProjectRole:
    result = await conn.execute(select(ProjectRole).where(ProjectRole.urn == group.urn))
    role = result.scalar_one_or_none()

    if role is not None:
        return await _assign_role(role, group, conn)

    role = ProjectRole(
        project_id=project.project_id,
        name=group.display_name,
        description=group.description,
        urn=group.urn,
        scim_id=group.scim_id,
        people=await _people_for_group(group, conn),
    )
    project.roles.append(role)
    return role


async def sync_collaborations(
    collaborations: list[Collaboration],
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> list[Project]:
    """
    Create or update the project for each resolved collaboration, along with
    its people and roles. Running this twice with the same collaborations
    changes nothing the second time.

    Parameters
    ----------
    collaborations: list[Collaboration]
        Collaborations, as returned by `collaborations.resolve`.
    conn: AsyncSession
        The database session.
    log: FilteringBoundLogger
        Logger instance.

    Returns
    -------
    list[Project]
        One project per collaboration, in order.
    """
    projects = []

    for collaboration in collaborations:
        group = collaboration.collaboration_group
        project_log = log.bind(scim_id=group.scim_id, urn=group.urn)

        try:
            project = await read_project_by_scim_id(
                scim_id=group.scim_id, conn=conn, log=project_log
            )
            project.title = group.display_name
            project.description = group.description
            project_log = project_log.bind(project_created=False)
        except ProjectNotFound:
            project = Project(
                title=group.display_name,
                description=group.description,
                scim_id=group.scim_id,
                start_date=group.created,
                people=[],
                roles=[],
            )
            conn.add(project)
            await conn.flush()
            project_log = project_log.bind(project_created=True)

        added = await _add_members(project, group, conn)

        for role_group in collaboration.groups:
            await _upsert_role(project, role_group, conn)

        await conn.flush()
        await project_log.ainfo(
            "project.synced",
            project_id=project.project_id,
            number_of_new_people=added,
            number_of_roles=len(collaboration.groups),
        )

        projects.append(project)

    return projects


async def sync_project(
    project_id: UUID,
    directory: GroupDirectory,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> Project:
    """
    Re-read a project's collaboration group and the groups behind its roles
    from the directory. New members are added to the project and every role
    is handed to exactly the current members of its group.

    Raises
    ------
    ProjectNotFound
        If the project does not exist, or its collaboration group is gone
        from the directory.
    GroupNotFound
        If the group behind one of the project's roles is gone from the
        directory.
    """
    log = log.bind(project_id=project_id)
    project = await read_by_id(project_id=project_id, conn=conn, log=log)

    scim_group = (
        await directory.get_group(project.scim_id) if project.scim_id else None
    )

    if scim_group is None:
        await log.ainfo("project.sync.group_not_found", scim_id=project.scim_id)
        raise ProjectNotFound(f"Project {project_id} has no group in the directory")

    group = map_scim_group(directory_urn(scim_group.group_info.urn), scim_group)
    project.title = group.display_name
    project.description = group.description

    added = await _add_members(project, group, conn)

    for role in project.roles:
        role_group = await directory.get_group(role.scim_id)

        if role_group is None:
            await log.ainfo(
                "project.sync.role_not_found", urn=role.urn, scim_id=role.scim_id
            )
            raise GroupNotFound(f"Group with URN {role.urn} not found")

        await _assign_role(role, map_scim_group(role.urn, role_group), conn)

    await conn.flush()
    await log.ainfo(
        "project.sync.complete",
        number_of_new_people=added,
        number_of_roles=len(project.roles),
    )

    return project
