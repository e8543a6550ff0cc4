from pydantic import BaseModel
from typing import List, Literal, Optional
from datetime import datetime


class CustomerCreate(BaseModel):
    name: str
    code: Optional[str] = None  # generated from the serial id when omitted
    phone: Optional[str] = None
    email: Optional[str] = None
    governorate: Optional[str] = None
    city: Optional[str] = None
    area: Optional[str] = None
    street_address: Optional[str] = None
    insurance_provider: Optional[str] = None
    policy_number: Optional[str] = None
    chronic_conditions: Optional[List[str]] = None
    notes: Optional[str] = None


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    governorate: Optional[str] = None
    city: Optional[str] = None
    area: Optional[str] = None
    street_address: Optional[str] = None
    insurance_provider: Optional[str] = None
    policy_number: Optional[str] = None
    chronic_conditions: Optional[List[str]] = None
    notes: Optional[str] = None
    status: Optional[Literal["active", "inactive"]] = None
    points: Optional[float] = None


class CustomerResponse(BaseModel):
    id: int
    serial_id: int
    code: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    governorate: Optional[str] = None
    city: Optional[str] = None
    area: Optional[str] = None
    street_address: Optional[str] = None
    insurance_provider: Optional[str] = None
    policy_number: Optional[str] = None
    chronic_conditions: Optional[List[str]] = None
    notes: Optional[str] = None
    status: str
    points: float
    total_purchases: float = 0
    last_visit: Optional[datetime] = None

    class Config:
        from_attributes = True
