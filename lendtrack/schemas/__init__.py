from lendtrack.schemas.user import UserCreate, UserUpdate, UserResponse, LoginRequest
from lendtrack.schemas.item import ItemCreate, ItemUpdate, ItemResponse, QuantityRequest, InventoryStats
from lendtrack.schemas.loan import LoanCreate, LoanResponse, LoanGroupCreate, LoanGroupResponse, LoanGroupDetail
from lendtrack.schemas.lifecycle import LifecycleRequest, LifecycleEventResponse
from lendtrack.schemas.document import DocumentCreate, DocumentResponse
from lendtrack.schemas.activity import ActivityResponse
from lendtrack.schemas.pagination import Page

__all__ = [
    "UserCreate", "UserUpdate", "UserResponse", "LoginRequest",
    "ItemCreate", "ItemUpdate", "ItemResponse", "QuantityRequest", "InventoryStats",
    "LoanCreate", "LoanResponse", "LoanGroupCreate", "LoanGroupResponse", "LoanGroupDetail",
    "LifecycleRequest", "LifecycleEventResponse",
    "DocumentCreate", "DocumentResponse",
    "ActivityResponse",
    "Page",
]
