from pydantic import BaseModel, Field


class SubcategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(default="#888888", pattern=r"^#[0-9a-fA-F]{6}$")
    subcategories: list[str] = Field(default_factory=list)


class SubcategoryResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    category_id: int
    name: str
    order: int


class CategoryResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    name: str
    color: str
    order: int
    subcategories: list[SubcategoryResponse] = []
