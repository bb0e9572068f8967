from datetime import date, datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class RenewalCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def require_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        required = [
            ("service", "service"),
            ("provider", "provider"),
            ("domain", "domain"),
            ("purchaseDate", "purchase_date"),
            ("renewalDate", "renewal_date"),
            ("cost", "cost"),
        ]
        missing = [alias for alias, name in required if _blank(data.get(alias, data.get(name)))]
        if missing:
            raise PydanticCustomError(
                "missing_fields",
                "Missing required field(s): {fields}",
                {"fields": ", ".join(missing)},
            )
        return data

    service: str
    provider: str
    domain: str
    purchase_date: date = Field(alias="purchaseDate")
    renewal_date: date = Field(alias="renewalDate")
    cost: float
    auto_renew: bool = Field(default=False, alias="autoRenew")
    icon: Optional[str] = Field(default=None, alias="iconType")

    @field_validator("cost", mode="before")
    @classmethod
    def lenient_cost(cls, value: Any) -> float:
        if isinstance(value, bool):
            return 0.0
        if isinstance(value, (int, float)):
            return float(value)
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0

    @field_validator("auto_renew", mode="before")
    @classmethod
    def strict_bool(cls, value: Any) -> bool:
        return value if isinstance(value, bool) else False


class RenewalUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    service: str = Field(min_length=1)
    provider: str = Field(min_length=1)
    domain: str = Field(min_length=1)
    purchase_date: date
    renewal_date: date
    cost: float
    auto_renew: bool = Field(default=False, alias="autoRenew")
    daysuntilrenewal: Optional[int]
    icon: Optional[str]

    @field_validator("auto_renew", mode="before")
    @classmethod
    def bool_or_true_string(cls, value: Any) -> bool:
        return value if isinstance(value, bool) else value == "true"


class RenewalRow(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    service: str
    provider: str
    domain: str
    purchase_date: date
    renewal_date: date
    cost: float
    auto_renew: bool = Field(serialization_alias="autoRenew")
    status: str
    icon_type: str = Field(default="Globe", serialization_alias="iconType")


class Renewal(BaseModel):
    id: int
    service: str
    provider: str
    domain: str
    purchase_date: date
    renewal_date: date
    cost: float
    autorenew: bool
    daysuntilrenewal: Optional[int] = None
    icon: Optional[str] = None
    status: str
    active: bool
    created_at: Optional[datetime] = None
    updated_date: Optional[datetime] = None

    class Config:
        from_attributes = True
