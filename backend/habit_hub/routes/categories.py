from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from typing import List
from habit_hub.core.deps import get_habit_store
from habit_hub.services.habit_store import HabitStore

router = APIRouter()


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class CategoryResponse(BaseModel):
    id: str
    name: str


@router.get("/", response_model=List[CategoryResponse])
async def list_categories(store: HabitStore = Depends(get_habit_store)):
    return [CategoryResponse(id=c.id, name=c.name) for c in store.list_categories()]


@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(category: CategoryCreate, store: HabitStore = Depends(get_habit_store)):
    category_id = store.create_category(category.name)
    return CategoryResponse(id=category_id, name=category.name)


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(category_id: str, category: CategoryCreate, store: HabitStore = Depends(get_habit_store)):
    store.update_category(category_id, category.name)
    return CategoryResponse(id=category_id, name=category.name)


@router.delete("/{category_id}")
async def delete_category(category_id: str, store: HabitStore = Depends(get_habit_store)):
    """Delete a category; its habits become uncategorized"""
    store.delete_category(category_id)
    return {"message": "Category deleted successfully"}
