from sqlalchemy import Column, Integer, Numeric, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from database import Base

class DebitNoteItem(Base):
    __tablename__ = "debit_note_items"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    debit_note_id = Column(Integer, ForeignKey("debit_notes.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    quantity = Column(Numeric(12, 3), nullable=True)
    unit_price = Column(Numeric(14, 2), nullable=True)
    amount = Column(Numeric(14, 2), nullable=False)
    reason = Column(Text, nullable=True)

    debit_note = relationship("DebitNote", back_populates="items")
