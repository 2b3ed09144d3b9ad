"""Deal lookups shared by the workflow engine and scanners."""

from uuid import UUID

from sqlalchemy.orm import Session

from dealflow.db.models import Deal, Profile


def get_deal(db: Session, deal_id: UUID) -> Deal | None:
    return db.query(Deal).filter(Deal.id == deal_id).first()


def get_client(db: Session, deal: Deal) -> Profile | None:
    return db.query(Profile).filter(Profile.id == deal.client_id).first()


def get_broker_id(db: Session, deal: Deal) -> UUID | None:
    """The deal's broker is whoever is assigned to its client."""
    row = db.query(Profile.assigned_broker_id).filter(Profile.id == deal.client_id).first()
    return row[0] if row else None
