from typing import Optional
from pydantic import BaseModel

class CatalogRow(BaseModel):
    exercise_key: str
    exercise_name: str = ""
    video_url: str = ""
    default_requires_weight: Optional[bool] = None
    default_rest_seconds: Optional[int] = None
    is_active: Optional[bool] = None

class CatalogLookup(BaseModel):
    found: bool
    row: Optional[CatalogRow] = None
