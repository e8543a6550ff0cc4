from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime

ReturnReason = Literal["customer_request", "wrong_item", "damaged", "expired", "defective", "other"]


class ReturnItemCreate(BaseModel):
    drug_id: int
    name: Optional[str] = None
    quantity_returned: int = Field(gt=0)
    is_unit: bool = False
    original_price: float = 0
    refund_amount: float = Field(ge=0)
    reason: Optional[ReturnReason] = None
    condition: Literal["sellable", "damaged", "expired"] = "sellable"


class ReturnCreate(BaseModel):
    sale_id: str
    items: List[ReturnItemCreate]
    return_type: Literal["full", "partial", "unit"] = "partial"
    reason: ReturnReason = "customer_request"
    notes: Optional[str] = None
    total_refund: Optional[float] = None  # sum of item refunds when omitted
    date: Optional[datetime] = None


class ReturnItemResponse(BaseModel):
    id: int
    drug_id: Optional[int] = None
    name: str
    quantity_returned: int
    is_unit: bool
    original_price: float
    refund_amount: float
    reason: Optional[str] = None
    condition: str

    class Config:
        from_attributes = True


class ReturnResponse(BaseModel):
    id: int
    sale_id: str
    date: datetime
    return_type: str
    reason: str
    notes: Optional[str] = None
    processed_by: Optional[int] = None
    total_refund: float
    items: List[ReturnItemResponse] = []

    class Config:
        from_attributes = True
