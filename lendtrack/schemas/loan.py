from datetime import datetime, date
from pydantic import BaseModel, Field
from lendtrack.models.loan import BorrowerType, LoanStatus, LoanDisplayStatus


class Borrower(BaseModel):
    borrower_name: str = Field(..., min_length=1, max_length=255)
    borrower_type: BorrowerType
    borrower_contact: str | None = None


class LoanCreate(Borrower):
    item_id: int
    quantity: int = 1
    loan_date: date | None = None  # výchozí dnešek
    expected_return_date: date
    notes: str | None = None


class ReturnRequest(BaseModel):
    actual_return_date: date | None = None


class LoanResponse(BaseModel):
    id: int
    item_id: int | None
    item_code: str
    item_name: str
    loan_group_id: int | None
    quantity: int
    borrower_name: str
    borrower_type: BorrowerType
    borrower_contact: str | None
    loan_date: date
    expected_return_date: date
    actual_return_date: date | None
    status: LoanStatus
    display_status: LoanDisplayStatus
    notes: str | None
    created_by: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


class LoanGroupLine(BaseModel):
    item_id: int
    quantity: int = 1


class LoanGroupCreate(Borrower):
    loan_date: date | None = None
    expected_return_date: date
    notes: str | None = None
    items: list[LoanGroupLine] = Field(..., min_length=1)


class LoanGroupResponse(BaseModel):
    id: int
    code: str
    borrower_name: str
    borrower_type: BorrowerType
    borrower_contact: str | None
    loan_date: date
    expected_return_date: date
    actual_return_date: date | None
    status: LoanStatus
    display_status: LoanDisplayStatus
    notes: str | None
    created_by: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


class LoanGroupDetail(LoanGroupResponse):
    loans: list[LoanResponse]
