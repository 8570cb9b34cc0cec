"""
Persona Service - lookup of prompt templates used as chat personas.
"""
from typing import List, Optional

from saaskit.core.exceptions import PersonaNotFoundError
from saaskit.core.logging_config import get_logger
from saaskit.database.connection import DatabaseConnection, get_database
from saaskit.database.models import PromptTemplate

logger = get_logger(__name__)


class PersonaService:

    def __init__(self, db: Optional[DatabaseConnection] = None):
        self._db = db

    @property
    def db(self) -> DatabaseConnection:
        return self._db or get_database()

    def get_by_name(self, name: str) -> PromptTemplate:
        """
        Find a persona by its (English) name.

        Raises:
            PersonaNotFoundError: no template has that name
        """
        with self.db.get_session() as session:
            persona = (
                session.query(PromptTemplate)
                .filter(PromptTemplate.name == name)
                .first()
            )
            if persona is None:
                logger.info(f"Unknown persona requested: {name!r}")
                raise PersonaNotFoundError(name)
            return persona

    def record_use(self, persona_id: str) -> None:
        with self.db.get_session() as session:
            session.query(PromptTemplate).filter(PromptTemplate.id == persona_id).update(
                {PromptTemplate.use_count: PromptTemplate.use_count + 1},
                synchronize_session=False,
            )

    def list_public(self) -> List[PromptTemplate]:
        """Public personas, system personas first, then by name."""
        with self.db.get_session() as session:
            return (
                session.query(PromptTemplate)
                .filter(PromptTemplate.is_public.is_(True))
                .order_by(PromptTemplate.is_system.desc(), PromptTemplate.name.asc())
                .all()
            )


_persona_service: Optional[PersonaService] = None


def get_persona_service() -> PersonaService:
    global _persona_service
    if _persona_service is None:
        _persona_service = PersonaService()
    return _persona_service
