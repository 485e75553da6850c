"""
A simple CLI for maintaining the SRAM group cache and checking how role
claims resolve.
"""

import asyncio
import sys

import structlog
from pydantic import TypeAdapter

USAGE = (
    "Supported commands are conflux setup, conflux refresh-cache, "
    "or conflux resolve {role} [{role} ...]"
)


async def refresh_cache():
    from conflux.config.settings import Settings
    from conflux.service.collaborations import refresh_cache as refresh
    from conflux.service.directory import directory_from_settings

    settings = Settings()
    manager = settings.async_manager()
    log = structlog.get_logger()

    try:
        async with manager.session() as conn:
            async with conn.begin():
                count = await refresh(
                    directory=directory_from_settings(settings), conn=conn, log=log
                )
    finally:
        await manager.dispose()

    print(f"Cached {count} groups")


async def resolve(roles: list[str]):
    from conflux.config.settings import Settings
    from conflux.core.collaboration import Collaboration
    from conflux.core.urn import collaborations_from_roles
    from conflux.service.collaborations import resolve as resolve_collaborations
    from conflux.service.directory import directory_from_settings

    settings = Settings()
    manager = settings.async_manager()
    log = structlog.get_logger()

    requests = collaborations_from_roles(roles)

    try:
        async with manager.session() as conn:
            async with conn.begin():
                collaborations = await resolve_collaborations(
                    requests=requests,
                    directory=directory_from_settings(settings),
                    conn=conn,
                    log=log,
                )
    finally:
        await manager.dispose()

    adapter = TypeAdapter(list[Collaboration])
    print(adapter.dump_json(collaborations, indent=2).decode("utf-8"))


def main():
    try:
        command = sys.argv[1]
    except IndexError:
        print(USAGE)
        exit(1)

    if command == "setup":
        from conflux.config.settings import Settings

        Settings().sync_manager().create_all()
        print("Setup complete")
        exit(0)

    if command == "refresh-cache":
        asyncio.run(refresh_cache())
        exit(0)

    if command == "resolve":
        roles = sys.argv[2:]

        if not roles:
            print(USAGE)
            exit(1)

        asyncio.run(resolve(roles))
        exit(0)

    print(USAGE)
    exit(1)
