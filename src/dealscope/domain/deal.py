# src/dealscope/domain/deal.py
from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

# Asset classes the underwriting form supports
PropertyType = Literal[
    "Single Family",
    "2-Family",
    "Multi-Family",
    "Condo",
    "Commercial",
]

# Display only; the calculator ignores it
ExitStrategy = Literal[
    "Retail Sale",
    "Wholesale Flip",
    "Rental Hold",
    "Fix & Flip",
]

PROPERTY_TYPES: tuple[str, ...] = get_args(PropertyType)
EXIT_STRATEGIES: tuple[str, ...] = get_args(ExitStrategy)


class Deal(BaseModel):
    """
    Underwriting inputs for a single distressed-property deal.

    Divisors (bpo_value, strike_price, hold_period) must be strictly positive
    and no number may be inf or NaN,
    so a constructed Deal is always safe to feed to calculate_metrics.
    Accepts both snake_case names and the camelCase names used by the form.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, allow_inf_nan=False)

    address: str = ""
    property_type: PropertyType = Field("Single Family", alias="propertyType")
    units: int = Field(1, ge=1)

    bpo_value: float = Field(..., gt=0, alias="bpoValue", description="Broker's price opinion ($)")
    strike_price: float = Field(..., gt=0, alias="strikePrice", description="Acquisition price ($)")
    rehab_costs: float = Field(0.0, ge=0, alias="rehabCosts", description="Rehab budget ($)")
    hold_period: int = Field(..., gt=0, alias="holdPeriod", description="Months held before exit")
    exit_strategy: ExitStrategy = Field("Retail Sale", alias="exitStrategy")
    sale_price: float = Field(..., ge=0, alias="salePrice", description="Expected exit price ($)")

    latitude: float = 0.0
    longitude: float = 0.0

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)
