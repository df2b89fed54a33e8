"""Shared response envelope and base schema."""
from typing import Generic, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Schema serialized with camelCase keys; accepts either spelling on input."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class ApiResponse(BaseModel, Generic[DataT]):
    """Success envelope returned by every endpoint."""

    status: int
    data: DataT
    message: str = "Success"
