from pydantic import BaseModel
from typing import Optional

class ClientBase(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None

class Client(ClientBase):
    id: int

    class Config:
        from_attributes = True

class ClientCreated(BaseModel):
    message: str
    id: int

class ClientMutation(BaseModel):
    message: str
    affectedRows: int
