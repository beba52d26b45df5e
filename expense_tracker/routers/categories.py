from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from expense_tracker.models import Category, CategoryIn, CategoryUpdateIn
from expense_tracker.services.category_service import CategoryService

from .deps import get_category_service

router = APIRouter(prefix="/categories", tags=["categories"])


class CategoryOut(BaseModel):
    id: int
    name: str
    color: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CategorySummaryOut(BaseModel):
    id: int
    name: str
    color: str


class NameExistsOut(BaseModel):
    name: str
    exists: bool


def category_to_out(category: Category) -> CategoryOut:
    return CategoryOut(
        id=category.id,
        name=category.name,
        color=category.color,
        description=category.description,
        created_at=category.created_at,
        updated_at=category.updated_at,
    )


def category_to_summary(category: Category) -> CategorySummaryOut:
    return CategorySummaryOut(id=category.id, name=category.name, color=category.color)


@router.get("/", response_model=List[CategorySummaryOut], summary="List categories")
async def list_categories(
    order_by_name: bool = Query(False, description="Sort alphabetically by name"),
    service: CategoryService = Depends(get_category_service),
):
    return [category_to_summary(c) for c in service.list_categories(order_by_name)]


@router.get(
    "/search", response_model=List[CategorySummaryOut], summary="Search by name"
)
async def search_categories(
    keyword: str = Query(..., description="Case-insensitive substring of the name"),
    service: CategoryService = Depends(get_category_service),
):
    return [category_to_summary(c) for c in service.search_categories(keyword)]


@router.get(
    "/unused",
    response_model=List[CategoryOut],
    summary="Categories without any expense",
)
async def unused_categories(service: CategoryService = Depends(get_category_service)):
    return [category_to_out(c) for c in service.unused_categories()]


@router.get("/exists", response_model=NameExistsOut, summary="Check a name is taken")
async def category_exists(
    name: str = Query(...),
    service: CategoryService = Depends(get_category_service),
):
    return NameExistsOut(name=name, exists=service.exists_by_name(name))


@router.get("/by-name/{name}", response_model=CategoryOut, summary="Get by exact name")
async def get_category_by_name(
    name: str, service: CategoryService = Depends(get_category_service)
):
    return category_to_out(service.get_category_by_name(name))


@router.get("/{category_id}", response_model=CategoryOut, summary="Get one category")
async def get_category(
    category_id: int, service: CategoryService = Depends(get_category_service)
):
    return category_to_out(service.get_category(category_id))


@router.post(
    "/",
    response_model=CategoryOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
)
async def create_category(
    payload: CategoryIn, service: CategoryService = Depends(get_category_service)
):
    return category_to_out(service.create_category(payload))


@router.patch("/{category_id}", response_model=CategoryOut, summary="Update category")
async def update_category(
    category_id: int,
    payload: CategoryUpdateIn,
    service: CategoryService = Depends(get_category_service),
):
    return category_to_out(service.update_category(category_id, payload))


@router.delete("/{category_id}", status_code=204, summary="Delete an unused category")
async def delete_category(
    category_id: int, service: CategoryService = Depends(get_category_service)
):
    service.delete_category(category_id)
    return None
