"""
User Service - local user rows for ids issued by the auth provider.
"""
from typing import Optional

from sqlalchemy.exc import IntegrityError

from saaskit.core.exceptions import AuthenticationError
from saaskit.core.logging_config import get_logger
from saaskit.database.connection import DatabaseConnection, get_database
from saaskit.database.models import User

logger = get_logger(__name__)


class UserService:

    def __init__(self, db: Optional[DatabaseConnection] = None):
        self._db = db

    @property
    def db(self) -> DatabaseConnection:
        return self._db or get_database()

    def ensure_user(self, user_id: str, email: Optional[str] = None) -> User:
        """
        Return the user row, creating it the first time the id is seen.

        Several first requests of a new user can race to insert the row;
        the losers pick up the row the winner committed.
        """
        with self.db.get_session() as session:
            user = session.get(User, user_id)
            if user is not None:
                if email and user.email != email:
                    user.email = email
                return user

        try:
            with self.db.get_session() as session:
                user = User(id=user_id, email=email)
                session.add(user)
                session.flush()
        except IntegrityError:
            logger.debug(f"User {user_id} was provisioned by a concurrent request")
            with self.db.get_session() as session:
                return session.get(User, user_id)

        logger.info(f"Provisioned user {user_id}")
        return user

    def get_user(self, user_id: str) -> User:
        with self.db.get_session() as session:
            user = session.get(User, user_id)
            if user is None:
                raise AuthenticationError()
            return user


_user_service: Optional[UserService] = None


def get_user_service() -> UserService:
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service
