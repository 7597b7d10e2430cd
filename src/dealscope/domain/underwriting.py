# src/dealscope/domain/underwriting.py
from dataclasses import dataclass
from typing import Literal

Verdict = Literal["buy", "consider", "pass"]
RiskLevel = Literal["low", "medium", "high"]


@dataclass(frozen=True)
class CalculatedMetrics:
    discount: float          # % strike undercuts BPO (negative = premium)
    closing_costs: float
    holding_costs: float
    total_investment: float
    selling_costs: float
    net_proceeds: float
    profit: float
    roi: float               # profit / total investment, %
    irr: float               # annualized holding-period return, %
    ltv: float               # strike / BPO, %
    cost_basis: float

    def to_dict(self) -> dict[str, float]:
        return {
            "discount": self.discount,
            "closingCosts": self.closing_costs,
            "holdingCosts": self.holding_costs,
            "totalInvestment": self.total_investment,
            "sellingCosts": self.selling_costs,
            "netProceeds": self.net_proceeds,
            "profit": self.profit,
            "roi": self.roi,
            "irr": self.irr,
            "ltv": self.ltv,
            "costBasis": self.cost_basis,
        }


@dataclass(frozen=True)
class RiskFactor:
    name: str
    level: RiskLevel
    percentage: float        # intensity score 0-100, not a probability
    description: str

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "level": self.level,
            "percentage": self.percentage,
            "description": self.description,
        }
