from pydantic import BaseModel
from datetime import datetime

class UserOut(BaseModel):
    id: int
    username: str
    role: str
    created_at: datetime | None = None
    class Config:
        from_attributes = True
