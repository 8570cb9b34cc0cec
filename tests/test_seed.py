"""Tests for persona and plan seed data."""

from __future__ import annotations

from saaskit.database.connection import get_database
from saaskit.database.models import MembershipPlan, PromptTemplate
from saaskit.database.seed import PERSONAS, PLANS, main, seed_personas, seed_plans


def _count(model):
    with get_database().get_session() as session:
        return session.query(model).count()


class TestSeed:
    def test_seed_personas(self):
        with get_database().get_session() as session:
            assert seed_personas(session) == len(PERSONAS)
        assert _count(PromptTemplate) == 3

    def test_seed_is_idempotent(self):
        for _ in range(2):
            with get_database().get_session() as session:
                seed_personas(session)
                seed_plans(session)

        assert _count(PromptTemplate) == len(PERSONAS)
        assert _count(MembershipPlan) == len(PLANS)

    def test_reseed_restores_prompt(self):
        with get_database().get_session() as session:
            seed_personas(session)
        with get_database().get_session() as session:
            persona = session.query(PromptTemplate).filter(PromptTemplate.name == "Strategy Specialist").one()
            persona.prompt = "edited"

        with get_database().get_session() as session:
            seed_personas(session)
        with get_database().get_session() as session:
            persona = session.query(PromptTemplate).filter(PromptTemplate.name == "Strategy Specialist").one()
            assert persona.prompt.startswith("You are a seasoned strategy consultant")

    def test_system_personas_are_public(self):
        with get_database().get_session() as session:
            seed_personas(session)
        with get_database().get_session() as session:
            personas = session.query(PromptTemplate).all()
            assert all(p.is_public and p.is_system for p in personas)
            assert not any(p.requires_membership for p in personas)

    def test_main_creates_tables_and_seeds(self):
        assert main() == 0
        assert _count(PromptTemplate) == len(PERSONAS)
        assert _count(MembershipPlan) == len(PLANS)
