from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from models.companies import CompanyType

class CompanyBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    code: str = Field(..., min_length=1, max_length=20)
    company_type: CompanyType = CompanyType.MANUFACTURER
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    base_currency: str = Field("USD", min_length=3, max_length=3)

class CompanyCreate(CompanyBase):
    pass

class CompanyUpdate(BaseModel):
    name: Optional[str] = None
    company_type: Optional[CompanyType] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: Optional[bool] = None

class Company(CompanyBase):
    id: int
    tenant_id: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None

    class Config:
        from_attributes = True
