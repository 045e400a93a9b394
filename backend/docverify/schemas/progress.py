from pydantic import BaseModel


class ProgressResponse(BaseModel):
    member_id: str
    completed: int
    total: int
    ratio: float
    percent: int
    missing: list[str]
    uploaded: int
    approved: int
