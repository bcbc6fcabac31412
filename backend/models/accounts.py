from sqlalchemy import Column, Integer, String, Text, Boolean, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

# Debit-normal account types; everything else carries a credit balance.
DEBIT_NORMAL_TYPES = ("Asset", "Expense")

class Account(Base, TimestampMixin):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    account_code = Column(String(20), nullable=False, index=True)
    account_name = Column(String(100), nullable=False)
    account_type = Column(String(20), nullable=False)  # Asset, Liability, Equity, Revenue, Expense
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)
    # Projection of the ledger, assigned by crud.ledger.refresh_account_balances only.
    balance = Column(Numeric(14, 2), default=0, server_default='0', nullable=False)

    __table_args__ = (
        UniqueConstraint('company_id', 'account_code', name='_company_account_code_uc'),
    )

    company = relationship("Company", back_populates="accounts")

    @property
    def is_debit_normal(self):
        return self.account_type in DEBIT_NORMAL_TYPES
