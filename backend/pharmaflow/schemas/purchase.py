from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import date, datetime


class PurchaseItemCreate(BaseModel):
    drug_id: int
    name: Optional[str] = None
    quantity: int = Field(gt=0)  # packs
    cost_price: float = Field(ge=0)  # per pack
    expiry_date: Optional[date] = None
    sale_price: Optional[float] = None


class PurchaseCreate(BaseModel):
    supplier_id: Optional[int] = None
    supplier_name: Optional[str] = None
    external_invoice_id: Optional[str] = None
    payment_type: Literal["cash", "credit"] = "cash"
    status: Literal["pending", "completed"] = "pending"
    items: List[PurchaseItemCreate]
    date: Optional[datetime] = None


class PurchaseApproval(BaseModel):
    approver_name: Optional[str] = None  # defaults to the logged-in employee


class PurchaseRejection(BaseModel):
    reason: Optional[str] = None


class PurchaseItemResponse(BaseModel):
    id: int
    drug_id: Optional[int] = None
    name: str
    quantity: int
    cost_price: float
    expiry_date: Optional[date] = None
    sale_price: Optional[float] = None

    class Config:
        from_attributes = True


class PurchaseResponse(BaseModel):
    id: int
    invoice_id: str
    external_invoice_id: Optional[str] = None
    supplier_id: Optional[int] = None
    supplier_name: str
    date: datetime
    payment_type: str
    total_cost: float
    status: str
    approval_date: Optional[datetime] = None
    approved_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    items: List[PurchaseItemResponse] = []

    class Config:
        from_attributes = True
