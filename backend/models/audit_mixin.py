from sqlalchemy import Column, DateTime, String
from datetime import datetime
import os
import pytz

APP_TIMEZONE = os.getenv("APP_TIMEZONE", "UTC")


def now_in_app_timezone():
    return datetime.now(pytz.timezone(APP_TIMEZONE))


class TimestampMixin:
    """Mixin that provides created/updated timestamps and user info.

    Used by every model. Master data (companies, accounts, products) only needs
    this one; documents that must stay auditable also take `SoftDeleteMixin`.
    """
    # DateTime(timezone=True) keeps the offset of APP_TIMEZONE in Postgres.
    created_at = Column(DateTime(timezone=True), default=now_in_app_timezone)
    updated_at = Column(DateTime(timezone=True), onupdate=now_in_app_timezone)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)


class SoftDeleteMixin:
    """Mixin for soft-delete columns (deleted_at, deleted_by).

    Apply this to financial records (orders, invoices, bills, receipts,
    payments, journal entries). Those rows are hidden by the session-level
    filter in `database.py`, never removed.
    """
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    deleted_by = Column(String, nullable=True)


class AuditMixin(TimestampMixin, SoftDeleteMixin):
    """Timestamps + soft-delete, for financial documents."""
    pass
