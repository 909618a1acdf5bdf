from pydantic import BaseModel


class UserRecord(BaseModel):
    id: int
    username: str
    email: str

    class Config:
        from_attributes = True
