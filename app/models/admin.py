# app/models/admin.py

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class AdminLogin(BaseModel):
    # Blank defaults so missing credentials surface as a 400 from the route.
    email: str = ""
    password: str = ""

class Token(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"

class GateStatus(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_registration_open: bool

class Message(BaseModel):
    message: str
