"""
Dependency Injection Providers for VocabWorld

FastAPI dependencies that bind session-scoped repositories to the
request's database session.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.database import get_session
from app.infrastructure.db.repositories import (
    UserProfileRepository,
    VocabularyRepository,
    ProgressRepository,
)


# Type alias for session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_user_profile_repository(
    session: SessionDep,
) -> AsyncGenerator[UserProfileRepository, None]:
    """
    Dependency provider for UserProfileRepository.

    Usage:
        @router.get("/profile")
        async def get_profile(
            repo: UserProfileRepository = Depends(get_user_profile_repository)
        ):
            ...
    """
    yield UserProfileRepository(session)


async def get_vocabulary_repository(
    session: SessionDep,
) -> AsyncGenerator[VocabularyRepository, None]:
    yield VocabularyRepository(session)


async def get_progress_repository(
    session: SessionDep,
) -> AsyncGenerator[ProgressRepository, None]:
    yield ProgressRepository(session)


# Type aliases for repository dependencies
UserProfileRepoDep = Annotated[
    UserProfileRepository,
    Depends(get_user_profile_repository)
]
VocabularyRepoDep = Annotated[
    VocabularyRepository,
    Depends(get_vocabulary_repository)
]
ProgressRepoDep = Annotated[
    ProgressRepository,
    Depends(get_progress_repository)
]
