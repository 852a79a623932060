"""Transaction models for the review and settlement workflow."""

import datetime as dt
from decimal import Decimal
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class TransactionStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
    SUBMITTED = "submitted"


class StatusFilter(str, Enum):
    ALL = "all"
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class UserRole(str, Enum):
    EMPLOYEE = "employee"
    CUSTOMER = "customer"


class Transaction(BaseModel):
    """A cross-border payment awaiting (or past) employee review.

    The payments backend is inconsistent about field names, so ``_id``/``id``
    and ``createdAt``/``created_at``/``date`` are all accepted on input.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    beneficiary_name: str = ""
    beneficiary_account_number: str | None = Field(
        default=None,
        validation_alias=AliasChoices("beneficiary_account_number", "beneficiary_account"),
    )
    amount: Decimal = Field(..., gt=0)
    currency: str
    bank_name: str | None = None
    bank_country: str | None = None
    swift_code: str | None = None
    status: TransactionStatus
    created_at: dt.datetime = Field(
        validation_alias=AliasChoices("created_at", "createdAt", "date"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> str:
        return str(v)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: str | TransactionStatus) -> TransactionStatus:
        if isinstance(v, TransactionStatus):
            return v
        return TransactionStatus(str(v).strip().lower())

    @field_validator("currency", mode="after")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.strip().upper()

    def with_status(self, status: TransactionStatus) -> "Transaction":
        return self.model_copy(update={"status": status})


class FilterPredicate(BaseModel):
    """Active filter of the review list. Every clause is optional."""

    model_config = ConfigDict(frozen=True)

    status: StatusFilter = StatusFilter.ALL
    date: dt.date | None = None
    beneficiary_text: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: str | StatusFilter) -> StatusFilter:
        if isinstance(v, StatusFilter):
            return v
        return StatusFilter(str(v).strip().lower())


class CurrentUser(BaseModel):
    """The signed-in staff member, as reported by the auth backend."""

    user_id: str = Field(validation_alias=AliasChoices("user_id", "identifier", "_id", "id"))
    display_name: str = Field(
        default="",
        validation_alias=AliasChoices("display_name", "full_name", "username"),
    )
    role: str = Field(default="", validation_alias=AliasChoices("role", "userType"))

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("user_id", mode="before")
    @classmethod
    def coerce_user_id(cls, v: object) -> str:
        return str(v)

    def has_role(self, role: str) -> bool:
        return self.role.lower() == role.lower()


class BatchSubmissionResult(BaseModel):
    submitted_count: int = Field(
        ..., ge=0, validation_alias=AliasChoices("submitted_count", "submittedCount")
    )

    model_config = ConfigDict(populate_by_name=True)
