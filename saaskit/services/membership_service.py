"""
Membership Service - plans, membership status and payment history.

This is the data behind the pricing page and the membership badge in the
navigation shell. A membership counts as active while its status is
``active`` and its end date lies in the future.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from saaskit.core.logging_config import LoggerMixin
from saaskit.database.connection import DatabaseConnection, get_database
from saaskit.database.models import (
    MembershipPlan,
    MembershipStatus,
    PaymentRecord,
    UserMembership,
)


@dataclass
class MembershipState:
    has_active_membership: bool
    membership: Optional[UserMembership] = None
    plan: Optional[MembershipPlan] = None


class MembershipService(LoggerMixin):

    def __init__(self, db: Optional[DatabaseConnection] = None):
        self._db = db

    @property
    def db(self) -> DatabaseConnection:
        return self._db or get_database()

    def list_plans(self) -> List[MembershipPlan]:
        with self.db.get_session() as session:
            return (
                session.query(MembershipPlan)
                .filter(MembershipPlan.is_active.is_(True))
                .order_by(MembershipPlan.sort_order.asc(), MembershipPlan.name.asc())
                .all()
            )

    def get_state(self, user_id: str, now: Optional[datetime] = None) -> MembershipState:
        """
        The user's current membership.

        With several overlapping active memberships, the one ending last wins.
        """
        now = now or datetime.utcnow()
        with self.db.get_session() as session:
            membership = (
                session.query(UserMembership)
                .filter(
                    UserMembership.user_id == user_id,
                    UserMembership.status == MembershipStatus.ACTIVE.value,
                    UserMembership.end_date > now,
                )
                .order_by(UserMembership.end_date.desc())
                .first()
            )
            if membership is None:
                return MembershipState(has_active_membership=False)

            plan = session.get(MembershipPlan, membership.plan_id)
            self.logger.debug(f"Active membership for user={user_id}: plan={plan.name if plan else None}")
            return MembershipState(has_active_membership=True, membership=membership, plan=plan)

    def has_active_membership(self, user_id: str) -> bool:
        return self.get_state(user_id).has_active_membership

    def payment_history(self, user_id: str, limit: int = 20) -> List[PaymentRecord]:
        with self.db.get_session() as session:
            return (
                session.query(PaymentRecord)
                .filter(PaymentRecord.user_id == user_id)
                .order_by(PaymentRecord.created_at.desc())
                .limit(limit)
                .all()
            )


_membership_service: Optional[MembershipService] = None


def get_membership_service() -> MembershipService:
    global _membership_service
    if _membership_service is None:
        _membership_service = MembershipService()
    return _membership_service
