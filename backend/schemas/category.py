from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class CategoryCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=3, max_length=100)


# PUT payload; any field may be omitted
class CategoryUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=3, max_length=100)
    is_available: Optional[bool] = None


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    is_available: bool


class CategoryResponse(BaseModel):
    ok: bool = True
    message: Optional[str] = None
    category: CategoryOut


# Both partitions are returned so clients can show disabled categories too
class CategoryListResponse(BaseModel):
    ok: bool = True
    categories_available: List[CategoryOut]
    categories_unavailable: List[CategoryOut]
