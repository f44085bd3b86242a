from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.models.enums import InvoiceStatus
from app.models.invoice import Invoice
from app.schemas.invoices import InvoiceCreateRequest, InvoiceSummary


router = APIRouter(tags=["invoices"])


@router.post(
    "/accounts/{account_id}/invoices",
    response_model=InvoiceSummary,
    status_code=status.HTTP_201_CREATED,
)
def create_invoice(
    account_id: str,
    payload: InvoiceCreateRequest,
    db: Session = Depends(get_db),
) -> Invoice:
    duplicate = db.scalar(
        select(Invoice).where(
            Invoice.account_id == account_id,
            Invoice.invoice_number == payload.invoice_number,
        )
    )
    if duplicate is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Invoice {payload.invoice_number} already exists for this account.",
        )
    if payload.status == InvoiceStatus.paid and payload.paid_at is None:
        paid_at = datetime.now(timezone.utc)
    else:
        paid_at = payload.paid_at

    invoice = Invoice(
        account_id=account_id,
        invoice_number=payload.invoice_number,
        client_name=payload.client_name.strip(),
        total=payload.total,
        status=payload.status,
        due_date=payload.due_date,
        paid_at=paid_at,
        created_at=payload.created_at or datetime.now(timezone.utc),
    )
    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    return invoice


@router.get("/accounts/{account_id}/invoices", response_model=list[InvoiceSummary])
def list_invoices(
    account_id: str,
    status_filter: InvoiceStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
) -> list[Invoice]:
    query = select(Invoice).where(Invoice.account_id == account_id)
    if status_filter is not None:
        query = query.where(Invoice.status == status_filter)
    return list(
        db.scalars(query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).limit(limit)).all()
    )
