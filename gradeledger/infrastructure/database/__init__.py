# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure.

Example:
    from gradeledger.infrastructure.database import init_database, get_session

    await init_database(settings)
    async with get_session() as session:
        result = await session.execute(select(Course))
"""

from gradeledger.infrastructure.database.connection import (
    check_database_connection,
    close_database,
    create_engine_from_settings,
    enable_sqlite_foreign_keys,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
    storage_failure,
)

__all__ = [
    "check_database_connection",
    "close_database",
    "create_engine_from_settings",
    "enable_sqlite_foreign_keys",
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "init_database",
    "storage_failure",
]
