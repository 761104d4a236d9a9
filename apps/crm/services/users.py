"""Acting-user resolution.

There is no authentication yet, so every write is attributed to a stand-in
user. Services receive an ``ActorResolver`` (or an already resolved user id)
instead of looking the user up themselves, which lets a real auth layer swap
the resolver without touching business logic.
"""

from typing import Optional, Protocol

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from apps.crm.core.errors import UnavailableError
from apps.crm.models import User, UserRole

logger = structlog.get_logger()

USER_UNRESOLVABLE = "Unable to resolve a valid user"
NO_USER_AVAILABLE = "No user available in the system"


class ActorResolver(Protocol):
    """Resolves the user a write is attributed to."""

    def resolve(self, db: Session) -> str:
        ...


def get_or_create_default_user(db: Session, email: str, name: str) -> User:
    """
    Look up the default user by email, creating it if absent.

    Args:
        db: Database session
        email: Well-known email of the default user
        name: Name used when the user has to be created

    Returns:
        The default user

    Raises:
        UnavailableError: If the user can be neither found nor created
    """
    try:
        user = db.query(User).filter(User.email == email).first()
        if user:
            return user

        user = User(name=name, email=email, role=UserRole.SALES)
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Another request created it first
            db.rollback()
            user = db.query(User).filter(User.email == email).first()
            if user is None:
                raise
            return user

        logger.info("Created default user", user_id=user.id, email=email)
        return user
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to resolve default user", error=str(e))
        raise UnavailableError(USER_UNRESOLVABLE) from e


def get_first_user(db: Session) -> Optional[User]:
    """Return the earliest created user, if any."""
    return db.query(User).order_by(User.created_at.asc(), User.id.asc()).first()


class DefaultUserResolver:
    """Attributes writes to the default sales user, creating it on first use."""

    def __init__(self, email: str, name: str):
        self.email = email
        self.name = name

    def resolve(self, db: Session) -> str:
        return get_or_create_default_user(db, self.email, self.name).id


class FirstUserResolver:
    """Attributes writes to whichever user exists first. Never creates one."""

    def resolve(self, db: Session) -> str:
        user = get_first_user(db)
        if user is None:
            raise UnavailableError(NO_USER_AVAILABLE)
        return user.id


class FixedUserResolver:
    """Attributes writes to a known user id, e.g. one taken from a session."""

    def __init__(self, user_id: str):
        self.user_id = user_id

    def resolve(self, db: Session) -> str:
        return self.user_id
