from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime


class ShiftOpen(BaseModel):
    opening_balance: float = Field(ge=0)


class ShiftClose(BaseModel):
    closing_balance: float = Field(ge=0)
    notes: Optional[str] = None


class CashMovement(BaseModel):
    type: Literal["in", "out"]
    amount: float = Field(gt=0)
    reason: str


class CashTransactionResponse(BaseModel):
    id: int
    shift_id: int
    time: datetime
    type: str
    amount: float
    reason: Optional[str] = None
    user_id: str
    related_sale_id: Optional[str] = None

    class Config:
        from_attributes = True


class ShiftResponse(BaseModel):
    id: int
    status: str
    open_time: datetime
    close_time: Optional[datetime] = None
    opened_by: str
    closed_by: Optional[str] = None
    opening_balance: float
    closing_balance: Optional[float] = None
    expected_balance: Optional[float] = None
    difference: Optional[float] = None
    cash_in: float
    cash_out: float
    cash_sales: float
    card_sales: float
    returns: float
    card_returns: float
    notes: Optional[str] = None
    transactions: List[CashTransactionResponse] = []

    class Config:
        from_attributes = True
