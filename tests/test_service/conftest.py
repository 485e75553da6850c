"""
Configuration variables and fixtures for the service layer tests.
"""

import pytest_asyncio
import structlog
from sqlalchemy import delete

from conflux.config.settings import Settings
from conflux.database.meta import ALL_TABLES
from conflux.service import urn_cache as urn_cache_service
from conflux.service.mock import DevelopmentGroupDirectory, development_group


@pytest_asyncio.fixture(scope="session")
def session_manager(server_settings: Settings, database):
    yield server_settings.async_manager()


@pytest_asyncio.fixture(scope="session")
def logger():
    yield structlog.get_logger()


@pytest_asyncio.fixture(loop_scope="session")
async def clean_database(session_manager):
    """
    Every test starts from an empty cache and registry.
    """
    async with session_manager.session() as conn:
        async with conn.begin():
            for table in reversed(ALL_TABLES):
                await conn.execute(delete(table))

    yield session_manager


@pytest_asyncio.fixture
def directory():
    yield DevelopmentGroupDirectory(
        groups=[
            development_group(
                scim_id="1", urn="surf:proj1", display_name="Project 1"
            ),
            development_group(
                scim_id="2", urn="surf:proj1:g1", display_name="Project 1 G1"
            ),
            development_group(
                scim_id="3", urn="surf:proj1:g2", display_name="Project 1 G2"
            ),
            development_group(
                scim_id="4", urn="other:proj2", display_name="Project 2"
            ),
        ]
    )


@pytest_asyncio.fixture(loop_scope="session")
async def populated_cache(clean_database, directory, logger):
    """
    A cache that covers every group in `directory`.
    """
    async with clean_database.session() as conn:
        async with conn.begin():
            await urn_cache_service.replace_all(
                [
                    (f"urn:mace:surf.nl:sram:group:{group.group_info.urn}", group.id)
                    for group in directory.groups.values()
                ],
                conn=conn,
                log=logger,
            )

    yield clean_database
