from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.models.enums import InvoiceStatus
from app.schemas.common import ORMModel


class InvoiceCreateRequest(BaseModel):
    invoice_number: str = Field(min_length=1, max_length=64)
    client_name: str = Field(default="Unknown Client", min_length=1, max_length=255)
    total: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    status: InvoiceStatus = InvoiceStatus.draft
    due_date: date | None = None
    paid_at: datetime | None = None
    created_at: datetime | None = None


class InvoiceSummary(ORMModel):
    id: int
    account_id: str
    invoice_number: str
    client_name: str
    total: Decimal
    status: InvoiceStatus
    due_date: date | None = None
    paid_at: datetime | None = None
    created_at: datetime
