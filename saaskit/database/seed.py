"""
Seed data - chat personas and membership plans.

Both seeds are upserts keyed by ``name`` so running them again refreshes
the rows instead of duplicating them.

Run with: python -m saaskit.database.seed
"""
import sys
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from saaskit.core.logging_config import get_logger
from saaskit.database.connection import get_database
from saaskit.database.models import (
    Currency,
    DurationType,
    MembershipPlan,
    PromptCategory,
    PromptTemplate,
)

logger = get_logger(__name__)


PERSONAS: List[Dict[str, Any]] = [
    {
        "name": "Marketing Specialist",
        "name_de": "Marketing-Spezialist",
        "description": "Expert in crafting marketing strategies and content.",
        "description_de": "Experte für die Erstellung von Marketingstrategien und -inhalten.",
        "category": PromptCategory.MARKETING.value,
        "prompt": (
            "You are a world-class marketing specialist. Your goal is to provide "
            "innovative and effective marketing advice. You are an expert in digital "
            "marketing, SEO, content strategy, and social media campaigns."
        ),
        "is_public": True,
        "is_system": True,
    },
    {
        "name": "Strategy Specialist",
        "name_de": "Strategie-Spezialist",
        "description": "Expert in business strategy and long-term planning.",
        "description_de": "Experte für Geschäftsstrategie und langfristige Planung.",
        "category": PromptCategory.BUSINESS.value,
        "prompt": (
            "You are a seasoned strategy consultant. You provide sharp, insightful, "
            "and actionable business advice. You are an expert in market analysis, "
            "competitive positioning, and corporate development."
        ),
        "is_public": True,
        "is_system": True,
    },
    {
        "name": "AI Engineer Specialist",
        "name_de": "KI-Ingenieur-Spezialist",
        "description": "Expert in AI engineering and machine learning models.",
        "description_de": "Experte für KI-Engineering und maschinelle Lernmodelle.",
        "category": PromptCategory.TECHNICAL.value,
        "prompt": (
            "You are a principal AI engineer. You provide expert guidance on building "
            "and deploying AI systems. You have deep knowledge of machine learning "
            "algorithms, neural networks, and MLOps."
        ),
        "is_public": True,
        "is_system": True,
    },
]


PLANS: List[Dict[str, Any]] = [
    {
        "name": "Free",
        "name_de": "Kostenlos",
        "description": "Try the AI assistants with the standard personas.",
        "description_de": "Teste die KI-Assistenten mit den Standard-Personas.",
        "price": Decimal("0.00"),
        "currency": Currency.USD.value,
        "duration_type": DurationType.MONTHLY.value,
        "duration_days": 30,
        "features": ["standard_personas"],
        "sort_order": 0,
    },
    {
        "name": "Professional",
        "name_de": "Professionell",
        "description": "All personas, longer history and priority responses.",
        "description_de": "Alle Personas, längerer Verlauf und priorisierte Antworten.",
        "price": Decimal("19.00"),
        "currency": Currency.USD.value,
        "duration_type": DurationType.MONTHLY.value,
        "duration_days": 30,
        "features": ["standard_personas", "premium_personas", "conversation_export"],
        "sort_order": 1,
    },
    {
        "name": "Enterprise",
        "name_de": "Enterprise",
        "description": "Everything in Professional, billed yearly with team support.",
        "description_de": "Alles aus Professionell, jährlich abgerechnet mit Team-Support.",
        "price": Decimal("499.00"),
        "currency": Currency.USD.value,
        "duration_type": DurationType.YEARLY.value,
        "duration_days": 365,
        "features": [
            "standard_personas",
            "premium_personas",
            "conversation_export",
            "team_support",
        ],
        "sort_order": 2,
    },
]


def _upsert(session: Session, model, rows: List[Dict[str, Any]]) -> int:
    changed = 0
    for values in rows:
        existing = session.query(model).filter(model.name == values["name"]).first()
        if existing is None:
            session.add(model(**values))
        else:
            for key, value in values.items():
                setattr(existing, key, value)
            existing.updated_at = datetime.utcnow()
        changed += 1
    return changed


def seed_personas(session: Session) -> int:
    """Insert or refresh the system personas. Returns the number of rows written."""
    count = _upsert(session, PromptTemplate, PERSONAS)
    logger.info(f"Seeded {count} AI personas")
    return count


def seed_plans(session: Session) -> int:
    """Insert or refresh the membership plans."""
    count = _upsert(session, MembershipPlan, PLANS)
    logger.info(f"Seeded {count} membership plans")
    return count


def main() -> int:
    from saaskit.core.config import get_settings
    from saaskit.core.logging_config import setup_logging
    from saaskit.database.init_db import init_tables

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_dir)

    try:
        init_tables()
        with get_database().get_session() as session:
            seed_personas(session)
            seed_plans(session)
    except Exception:
        logger.exception("Failed to seed database")
        return 1

    logger.info("Seed data written successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
