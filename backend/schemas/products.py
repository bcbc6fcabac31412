from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal

class ProductBase(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None
    sales_price: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    purchase_price: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)

class ProductCreate(ProductBase):
    company_id: int

class Product(ProductBase):
    id: int
    tenant_id: str
    company_id: int
    is_active: bool

    class Config:
        from_attributes = True
