from math import ceil
from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    items: List[T] = []
    total_count: int = Field(ge=0)
    page_number: int = Field(ge=1)
    page_size: int = Field(ge=1)

    @computed_field
    @property
    def total_pages(self) -> int:
        return ceil(self.total_count / self.page_size)

    @computed_field
    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages

    @computed_field
    @property
    def has_previous(self) -> bool:
        return self.page_number > 1
