from lendtrack.models.user import User
from lendtrack.models.item import Item, ItemCategory, ItemStatus, ItemUsage
from lendtrack.models.loan import Loan, LoanGroup, LoanStatus, LoanDisplayStatus, BorrowerType
from lendtrack.models.lifecycle import LifecycleEvent, LifecycleStatus, QuantityEvent, QuantityAction, RetirementSource
from lendtrack.models.document import Document, DocumentType
from lendtrack.models.activity import ActivityLog

__all__ = [
    "User",
    "Item", "ItemCategory", "ItemStatus", "ItemUsage",
    "Loan", "LoanGroup", "LoanStatus", "LoanDisplayStatus", "BorrowerType",
    "LifecycleEvent", "LifecycleStatus", "QuantityEvent", "QuantityAction", "RetirementSource",
    "Document", "DocumentType",
    "ActivityLog",
]
