from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional
from datetime import datetime


class CartItem(BaseModel):
    drug_id: int
    name: Optional[str] = None
    quantity: int = Field(gt=0)
    price: float = Field(ge=0)  # pack price
    is_unit: bool = False
    units_per_pack: Optional[int] = None  # defaults to the drug's pack size
    discount: float = 0


class SaleCreate(BaseModel):
    items: List[CartItem]
    customer_name: Optional[str] = None
    customer_code: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    payment_method: Literal["cash", "visa"] = "cash"
    sale_type: Literal["walk-in", "delivery"] = "walk-in"
    status: Literal["completed", "pending"] = "completed"
    delivery_fee: float = 0
    global_discount: float = 0
    subtotal: Optional[float] = None
    total: float
    date: Optional[datetime] = None  # register time; server time when omitted


class StockCheckRequest(BaseModel):
    items: List[CartItem]


class SaleUpdate(BaseModel):
    status: Optional[Literal["completed", "pending", "cancelled"]] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    delivery_fee: Optional[float] = None


class SaleItemResponse(BaseModel):
    id: int
    drug_id: Optional[int] = None
    name: str
    quantity: int
    price: float
    is_unit: bool
    units_per_pack: int
    discount: float

    class Config:
        from_attributes = True


class SaleResponse(BaseModel):
    id: str
    date: datetime
    daily_order_number: int
    status: str
    payment_method: str
    sale_type: str
    customer_name: str
    customer_code: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    subtotal: Optional[float] = None
    global_discount: float
    delivery_fee: float
    total: float
    net_total: Optional[float] = None
    points_earned: float
    sold_by_employee_id: Optional[int] = None
    has_returns: bool
    return_ids: List[int] = []
    return_dates: List[str] = []
    return_details: List[dict] = []
    item_returned_quantities: Dict[str, int] = {}
    items: List[SaleItemResponse] = []

    class Config:
        from_attributes = True
