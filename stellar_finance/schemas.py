from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from stellar_finance.advisor.normalize import parse_choice
from stellar_finance.settings import TERM_OPTIONS, MONTHLY_INCOME_RANGE, DOWN_PAYMENT_RANGE


class CreditScoreRange(str, Enum):
    POOR = "POOR"
    FAIR = "FAIR"
    GOOD = "GOOD"
    EXCELLENT = "EXCELLENT"

    @property
    def label(self) -> str:
        return CREDIT_SCORE_LABELS[self.value]


class Lifestyle(str, Enum):
    COMMUTER = "COMMUTER"
    FAMILY = "FAMILY"
    OFFROAD = "OFFROAD"
    ECO_FRIENDLY = "ECO_FRIENDLY"
    PERFORMANCE = "PERFORMANCE"

    @property
    def label(self) -> str:
        return LIFESTYLE_LABELS[self.value]


# Etiquetas que ve el usuario (y que viajan en el prompt)
CREDIT_SCORE_LABELS = {
    "POOR": "Poor (<630)",
    "FAIR": "Fair (630-689)",
    "GOOD": "Good (690-719)",
    "EXCELLENT": "Excellent (720+)",
}

LIFESTYLE_LABELS = {
    "COMMUTER": "Daily Commuter",
    "FAMILY": "Family Adventures",
    "OFFROAD": "Off-road & Hauling",
    "ECO_FRIENDLY": "Eco-Conscious",
    "PERFORMANCE": "Performance Enthusiast",
}


class _CamelModel(BaseModel):
    # En el cable usamos camelCase (monthlyIncome, estimatedMsrp...)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class UserInput(_CamelModel):
    monthly_income: int = Field(..., ge=MONTHLY_INCOME_RANGE[0], le=MONTHLY_INCOME_RANGE[1])
    credit_score: CreditScoreRange
    down_payment: int = Field(..., ge=DOWN_PAYMENT_RANGE[0], le=DOWN_PAYMENT_RANGE[1])
    term: int
    lifestyle: Lifestyle

    @field_validator("credit_score", mode="before")
    @classmethod
    def _parse_credit_score(cls, v):
        if isinstance(v, CreditScoreRange):
            return v
        key = parse_choice(str(v), CREDIT_SCORE_LABELS)
        if key is None:
            raise ValueError(f"Unknown credit score range: {v!r}")
        return key

    @field_validator("lifestyle", mode="before")
    @classmethod
    def _parse_lifestyle(cls, v):
        if isinstance(v, Lifestyle):
            return v
        key = parse_choice(str(v), LIFESTYLE_LABELS)
        if key is None:
            raise ValueError(f"Unknown lifestyle: {v!r}")
        return key

    @field_validator("term")
    @classmethod
    def _check_term(cls, v: int) -> int:
        if v not in TERM_OPTIONS:
            raise ValueError(f"term must be one of {TERM_OPTIONS}")
        return v

    def with_term(self, term: int) -> "UserInput":
        """Copia nueva con otro plazo (el original no se toca)."""
        return UserInput.model_validate({**self.model_dump(), "term": term})


# ---------- Respuesta del modelo ----------
class CostBreakdownItem(_CamelModel):
    name: str
    value: float


class PaymentPlan(_CamelModel):
    plan_type: Literal["Finance", "Lease"]
    monthly_payment: float
    term: int
    apr: float
    cost_breakdown: List[CostBreakdownItem] = []
    pros: List[str] = []
    cons: List[str] = []


class SuggestedModel(_CamelModel):
    name: str
    estimated_msrp: float
    reasoning: str
    payment_plans: List[PaymentPlan] = []


class ApiResponse(_CamelModel):
    suggested_models: List[SuggestedModel]
    financial_tips: List[str] = []


# ---------- Peticiones HTTP ----------
class RecalculateRequest(_CamelModel):
    user_input: UserInput
    response: ApiResponse
    selected_vehicle: str
    term: int

    @field_validator("term")
    @classmethod
    def _check_term(cls, v: int) -> int:
        if v not in TERM_OPTIONS:
            raise ValueError(f"term must be one of {TERM_OPTIONS}")
        return v


class ViewRequest(_CamelModel):
    response: ApiResponse
    selected_vehicle: Optional[str] = None
    term: Optional[int] = None


class ChatRequest(BaseModel):
    text: str = Field(..., description="User message text")


# ---------- Modelo de vista (lo que pinta la UI) ----------
class CostLineView(_CamelModel):
    name: str
    value: float
    display_value: str
    emphasis: Literal["final_total", "total_component", "plain"]


class PlanView(_CamelModel):
    plan_type: Literal["Finance", "Lease"]
    monthly_payment: float
    display_monthly_payment: str
    term: int
    apr: float
    cost_breakdown: List[CostLineView]
    pros: List[str]
    cons: List[str]


class VehicleTab(_CamelModel):
    name: str
    selected: bool


class TermOption(_CamelModel):
    term: int
    active: bool


class ResultsView(_CamelModel):
    vehicles: List[VehicleTab]
    selected_vehicle: Optional[str] = None
    estimated_msrp: Optional[float] = None
    display_msrp: str = ""
    reasoning: str = ""
    finance_plan: Optional[PlanView] = None
    lease_plan: Optional[PlanView] = None
    terms: List[TermOption]
    financial_tips: List[str]
    is_loading: bool = False
    is_recalculating: bool = False
    error: Optional[str] = None


class ChatMessageView(_CamelModel):
    sender: Literal["user", "bot"]
    text: str
    html: str
    is_loading: bool = False
