from typing import Optional
from fastapi import Header, HTTPException

def get_tenant_id(x_tenant_id: str = Header(...)) -> str:
    tenant_id = x_tenant_id.strip()
    if not tenant_id:
        raise HTTPException(status_code=400, detail="X-Tenant-ID header is missing")
    return tenant_id

def get_actor(x_user: Optional[str] = Header(None)) -> str:
    """Name recorded in created_by / changed_by columns. This is not an authentication check."""
    if x_user and x_user.strip():
        return x_user.strip()
    return "system"
