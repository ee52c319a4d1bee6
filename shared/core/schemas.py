from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel

# Shared properties
T = TypeVar("T")


class UserToken(BaseModel):
    user_id: int
    email: Optional[str] = None
    name: Optional[str] = None
    role: str
    department: Optional[str] = None
    exp: Optional[int] = None


class CommonQueryParams(EmptyStringModel):
    search: Optional[str] = None
    skip: Optional[int] = 0
    limit: Optional[int] = 20


class Lookup(BaseModel):
    id: Union[str, int]
    name: str

    model_config = ConfigDict(from_attributes=True)


class ExportResponse(BaseModel):
    filename: str
    data: List[Dict[str, Any]]

    model_config = ConfigDict(from_attributes=True)


class JsonOutResult(EmptyStringModel, Generic[T]):
    data: Optional[T] = None
    status: str
    status_code: str
    message: str
    field: Optional[str] = None
