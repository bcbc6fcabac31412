from sqlalchemy import func
from sqlalchemy.orm import Session


def next_sequence_number(db: Session, model, **scope) -> int:
    """Next per-scope sequence number, e.g. next_sequence_number(db, Invoice, company_id=7)."""
    query = db.query(func.max(model.sequence_number))
    for column, value in scope.items():
        query = query.filter(getattr(model, column) == value)
    return (query.scalar() or 0) + 1
