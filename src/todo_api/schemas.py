from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.
    """

    model_config = ConfigDict(strict=True, json_schema_extra={"example": {"text": "buy milk"}})

    text: str = Field(..., description="Text of the todo item")


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing Todo item.
    All fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(
        strict=True,
        json_schema_extra={"example": {"text": "buy milk", "completed": True}},
    )

    text: Optional[str] = Field(default=None, description="Text of the todo item")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"id": 1, "text": "buy milk", "completed": False}}
    )

    id: int = Field(..., description="Unique identifier of the todo item")
    text: str = Field(..., description="Text of the todo item")
    completed: bool = Field(..., description="Completion status flag")


# PUBLIC_INTERFACE
class LabelCreate(BaseModel):
    """Schema for creating a new Label."""

    model_config = ConfigDict(strict=True)

    name: str = Field(..., description="Display name of the label")


# PUBLIC_INTERFACE
class LabelOut(BaseModel):
    """Schema returned by the API for a Label."""

    id: int = Field(..., description="Unique identifier of the label")
    name: str = Field(..., description="Display name of the label")


# PUBLIC_INTERFACE
class UserCreate(BaseModel):
    """Schema for the sample user endpoint. Users are not stored."""

    model_config = ConfigDict(strict=True)

    username: str = Field(..., description="Name of the user")


# PUBLIC_INTERFACE
class UserOut(BaseModel):
    """Schema returned by the sample user endpoint."""

    id: int = Field(..., description="Fixed sample identifier")
    username: str = Field(..., description="Name of the user")
