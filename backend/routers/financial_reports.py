from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from database import get_db
from schemas.financial_reports import ProfitAndLoss, BalanceSheet
from crud import financial_reports as crud_financial_reports
from crud.exceptions import InvalidInput, NotFoundError
from datetime import date
from utils.tenancy import get_tenant_id

router = APIRouter(
    prefix="/reports",
    tags=["Financial Reports"],
)

@router.get("/profit-and-loss", response_model=ProfitAndLoss)
def get_profit_and_loss(
    company_id: int = Query(..., alias="companyId"),
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    try:
        return crud_financial_reports.get_profit_and_loss(
            db=db,
            company_id=company_id,
            start_date=start_date,
            end_date=end_date,
            tenant_id=tenant_id
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.get("/balance-sheet", response_model=BalanceSheet)
def get_balance_sheet(
    company_id: int = Query(..., alias="companyId"),
    as_of_date: date = Query(None, alias="asOfDate"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    try:
        return crud_financial_reports.get_balance_sheet(
            db=db,
            company_id=company_id,
            as_of_date=as_of_date or date.today(),
            tenant_id=tenant_id
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
