"""First sign-in registration.

A user is registered with a role the first time they sign in. Students also
get an empty progress record at that point. Later sign-ins keep the stored
role. Deciding who may become a teacher is up to the identity provider.
"""

from __future__ import annotations

import structlog

from classroom.core.models import ProgressRecord, Role, SessionContext
from classroom.core.repositories import ProgressRepository, UserRepository

logger = structlog.get_logger(__name__)


async def enroll_user(
    users: UserRepository,
    progress: ProgressRepository,
    user_id: str,
    requested_role: Role = Role.STUDENT,
) -> SessionContext:
    """Register ``user_id`` if needed and return its session context.

    Raises:
        RepositoryError: If the store fails
    """
    role = await users.get_role(user_id)
    if role is not None:
        logger.debug("user_known", user_id=user_id, role=role.value)
        return SessionContext(user_id=user_id, role=role)

    await users.set_role(user_id, requested_role)
    if requested_role is Role.STUDENT:
        await progress.put_progress(ProgressRecord(student_id=user_id))

    logger.info("user_enrolled", user_id=user_id, role=requested_role.value)
    return SessionContext(user_id=user_id, role=requested_role)
