"""
Base models for IP core metadata.

Every schema class derives from one of the bases here so camelCase and
snake_case spellings are reconciled once, at validation time, and never
again deeper in the pipeline.

Two ``extra`` policies exist:
    StrictModel (extra="forbid") is for the IP core document itself,
    where an unexpected key is almost always a typo.
    FlexibleModel (extra="ignore") is for memory-map models, where
    editor bookkeeping and vendor extensions ride along with the data.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class IpCoreBaseModel(BaseModel):
    """Base model with camelCase aliasing and assignment validation."""

    model_config = {
        "validate_assignment": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class StrictModel(IpCoreBaseModel):
    """Base model that forbids unknown fields."""

    model_config = {
        **IpCoreBaseModel.model_config,
        "extra": "forbid",
    }


class FlexibleModel(IpCoreBaseModel):
    """Base model that silently ignores unknown fields."""

    model_config = {
        **IpCoreBaseModel.model_config,
        "extra": "ignore",
    }


class VLNV(BaseModel):
    """
    Vendor-Library-Name-Version identifier for IP cores.

    Frozen so it can be hashed and used as a dictionary key.
    """

    vendor: str = Field(..., description="Vendor identifier (e.g., 'acme.com')")
    library: str = Field(..., description="Library name (e.g., 'peripherals')")
    name: str = Field(..., description="IP core name (e.g., 'uart_lite')")
    version: str = Field(..., description="Version string (e.g., '1.0')")

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    @field_validator("vendor", "library", "name", "version", mode="before")
    @classmethod
    def validate_identifiers(cls, v: Any, info: ValidationInfo) -> str:
        """Strip whitespace and reject empty parts; numeric versions become strings."""
        v = str(v).strip() if v is not None else ""
        if not v:
            raise ValueError(f"{info.field_name} cannot be empty")
        return v

    @property
    def full_name(self) -> str:
        """Return fully qualified VLNV string."""
        return f"{self.vendor}:{self.library}:{self.name}:{self.version}"

    def __str__(self) -> str:
        return self.full_name


class ParameterType(str, Enum):
    """Standard VHDL generic types."""

    INTEGER = "integer"
    NATURAL = "natural"
    POSITIVE = "positive"
    REAL = "real"
    BOOLEAN = "boolean"
    STRING = "string"


NUMERIC_PARAMETER_TYPES = frozenset(
    {ParameterType.INTEGER, ParameterType.NATURAL, ParameterType.POSITIVE, ParameterType.REAL}
)


class Parameter(StrictModel):
    """
    Generic/parameter definition for an IP core.

    ``data_type`` is kept as a lower-cased string so that generics with
    vector or user-defined types survive a round trip through the
    reverse parser.
    """

    name: str = Field(..., description="Parameter name")
    value: Any = Field(default=None, description="Default value")
    data_type: str = Field(default=ParameterType.INTEGER.value, description="Data type")
    description: str = Field(default="", description="Parameter description")

    @field_validator("data_type", mode="before")
    @classmethod
    def normalize_data_type(cls, v: Any) -> Any:
        if isinstance(v, Enum):
            return v.value
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Parameter name cannot be empty")
        return v

    @property
    def is_numeric(self) -> bool:
        """Check if parameter is of a numeric VHDL type."""
        return self.data_type in {t.value for t in NUMERIC_PARAMETER_TYPES}


class Polarity(str, Enum):
    """Reset polarity enumeration."""

    ACTIVE_HIGH = "activeHigh"
    ACTIVE_LOW = "activeLow"
