from sqlalchemy import Column, Integer, String, JSON, UniqueConstraint
from database import Base
from models.audit_mixin import TimestampMixin

class IdempotencyKey(Base, TimestampMixin):
    __tablename__ = "idempotency_keys"
    __table_args__ = (UniqueConstraint('tenant_id', 'endpoint', 'key', name='_tenant_endpoint_key_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    endpoint = Column(String(100), nullable=False)
    key = Column(String(255), nullable=False)
    request_hash = Column(String(64), nullable=False) # sha256 of the canonical request body
    status_code = Column(Integer, nullable=False)
    response_body = Column(JSON, nullable=False)
