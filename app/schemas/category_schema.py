from pydantic import BaseModel, ConfigDict
from datetime import datetime


class ResponseCategory(BaseModel):
    id: int
    name: str
    slug: str
    post_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
