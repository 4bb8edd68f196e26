"""
Database Infrastructure Package for VocabWorld

Exports database utilities, models, and repositories.
"""

from app.infrastructure.db.database import (
    DatabaseManager,
    build_database_url,
    get_db_manager,
    get_session,
    get_session_context,
    init_db,
    close_db,
)

from app.infrastructure.db.dependencies import (
    SessionDep,
    get_user_profile_repository,
    get_vocabulary_repository,
    get_progress_repository,
    UserProfileRepoDep,
    VocabularyRepoDep,
    ProgressRepoDep,
)


__all__ = [
    # Database management
    "DatabaseManager",
    "build_database_url",
    "get_db_manager",
    "get_session",
    "get_session_context",
    "init_db",
    "close_db",
    # Dependencies
    "SessionDep",
    "get_user_profile_repository",
    "get_vocabulary_repository",
    "get_progress_repository",
    "UserProfileRepoDep",
    "VocabularyRepoDep",
    "ProgressRepoDep",
]
