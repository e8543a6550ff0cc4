from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime


class DrugCreate(BaseModel):
    name: str
    generic_name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    dosage_form: Optional[str] = None
    price: float = 0
    cost_price: float = 0
    stock: int = 0  # units
    units_per_pack: int = 1
    expiry_date: Optional[date] = None
    barcode: Optional[str] = None
    internal_code: Optional[str] = None
    supplier_id: Optional[int] = None
    max_discount: Optional[float] = None


class DrugUpdate(BaseModel):
    name: Optional[str] = None
    generic_name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    dosage_form: Optional[str] = None
    price: Optional[float] = None
    cost_price: Optional[float] = None
    stock: Optional[int] = None
    damaged_stock: Optional[int] = None
    units_per_pack: Optional[int] = None
    expiry_date: Optional[date] = None
    barcode: Optional[str] = None
    internal_code: Optional[str] = None
    supplier_id: Optional[int] = None
    max_discount: Optional[float] = None


class DrugResponse(BaseModel):
    id: int
    name: str
    generic_name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    dosage_form: Optional[str] = None
    price: float
    cost_price: float
    stock: int
    damaged_stock: int = 0
    units_per_pack: int
    expiry_date: Optional[date] = None
    barcode: Optional[str] = None
    internal_code: Optional[str] = None
    supplier_id: Optional[int] = None
    max_discount: Optional[float] = None
    stock_display: Optional[str] = None

    class Config:
        from_attributes = True


class RestockRequest(BaseModel):
    packs: int = Field(gt=0)


class StockAdjustmentRequest(BaseModel):
    new_stock: int = Field(ge=0)  # units
    reason: str


class StockMovementResponse(BaseModel):
    id: int
    drug_id: int
    movement_type: str
    quantity: int
    previous_stock: int
    new_stock: int
    reference_id: Optional[str] = None
    reason: Optional[str] = None
    employee_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
