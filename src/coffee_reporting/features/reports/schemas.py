"""Coffee sales report schemas

Pydantic models for the documents read from the ``orders`` and
``employeeAccounts`` collections and for the report assembled from them.
Field aliases are the document keys, which are also the JSON keys of the
``/report`` response."""
from decimal import Decimal
from typing import Annotated, Any, List, Optional

from bson import Decimal128, ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_serializer


def _coerce_bson_number(value: Any) -> Any:
    if isinstance(value, Decimal128):
        return float(value.to_decimal())
    if isinstance(value, Decimal):
        return float(value)
    return value


# Currency fields may be stored as BSON Decimal128.
Money = Annotated[float, BeforeValidator(_coerce_bson_number)]


class StoredDocument(BaseModel):
    """Base for documents that carry a store-assigned ``_id``."""
    id: Optional[str] = Field(None, alias="_id")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> Any:
        if isinstance(value, (ObjectId, int)):
            return str(value)
        return value

    @model_serializer(mode="wrap")
    def _omit_empty_id(self, handler):
        data = handler(self)
        # "_id" when dumped by alias, "id" otherwise
        for key in ("_id", "id"):
            if key in data and not data[key]:
                del data[key]
        return data


class CoffeeOrder(StoredDocument):
    coffee_type: str = Field(..., alias="coffeetype")
    coffee_qty: int = Field(..., ge=0, alias="coffeeqty")
    employee_id: str = Field(..., alias="employeeId")
    amount: Money


class EmployeeAccount(StoredDocument):
    employee_id: str = Field(..., alias="employeeId")
    balance: Money
    name: str


class SalesTotals(BaseModel):
    """Single row produced by the totals aggregation."""
    total_sales: int = Field(..., alias="totalSales")
    total_revenue: Money = Field(..., alias="totalRevenue")

    model_config = ConfigDict(populate_by_name=True)


class Report(BaseModel):
    # Totals cover the whole orders collection; recent_sales is capped.
    total_sales: int = Field(0, alias="totalsales")
    total_revenue: float = Field(0.0, alias="totalrevenue")
    recent_sales: List[CoffeeOrder] = Field(default_factory=list, alias="recentsales")
    employee_accounts: List[EmployeeAccount] = Field(default_factory=list, alias="employeeaccounts")

    model_config = ConfigDict(populate_by_name=True, frozen=True)
