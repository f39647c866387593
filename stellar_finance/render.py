# stellar_finance/render.py
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from stellar_finance.schemas import (
    ApiResponse,
    CostBreakdownItem,
    CostLineView,
    PaymentPlan,
    PlanView,
    ResultsView,
    SuggestedModel,
    TermOption,
    VehicleTab,
)
from stellar_finance.settings import TERM_OPTIONS

# Orden fijo de despliegue por tipo de plan (agrupa los renglones lógicamente)
FINANCE_ORDER = [
    "Vehicle Price (MSRP)",
    "Principal Loan Amount",
    "Total Interest Paid",
    "Down Payment",
    "Total Monthly Payments",
    "Total Cost",
]
LEASE_ORDER = [
    "Vehicle Price (MSRP)",
    "Est. Disposition Fee",
    "Due at Signing",
    "Total Monthly Payments",
    "Total Lease Cost",
]

FINAL_TOTALS = {"Total Cost", "Total Lease Cost"}
TOTAL_COMPONENTS = {"Down Payment", "Total Monthly Payments", "Due at Signing"} | FINAL_TOTALS


def fmt_usd(x) -> str:
    """Dólares enteros, .5 se aleja del cero: 27450.5 -> $27,451 ; -300 -> -$300"""
    v = int(Decimal(str(x)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return f"-${abs(v):,}" if v < 0 else f"${v:,}"


def display_order(plan_type: str) -> List[str]:
    return FINANCE_ORDER if plan_type == "Finance" else LEASE_ORDER


def sort_breakdown(items: List[CostBreakdownItem], plan_type: str) -> List[CostBreakdownItem]:
    """
    Reordena según la tabla del tipo de plan. Los nombres que no están en la tabla
    van después de los conocidos, en su orden original (desempate por posición).
    """
    order = display_order(plan_type)
    rank = {name: i for i, name in enumerate(order)}
    unknown = len(order)
    indexed = list(enumerate(items))
    indexed.sort(key=lambda p: (rank.get(p[1].name, unknown), p[0]))
    return [item for _, item in indexed]


def emphasis_for(name: str) -> str:
    if name in FINAL_TOTALS:
        return "final_total"
    if name in TOTAL_COMPONENTS:
        return "total_component"
    return "plain"


def _plan_view(plan: PaymentPlan) -> PlanView:
    lines = [
        CostLineView(
            name=item.name,
            value=item.value,
            display_value=fmt_usd(item.value),
            emphasis=emphasis_for(item.name),
        )
        for item in sort_breakdown(plan.cost_breakdown, plan.plan_type)
    ]
    return PlanView(
        plan_type=plan.plan_type,
        monthly_payment=plan.monthly_payment,
        display_monthly_payment=fmt_usd(plan.monthly_payment),
        term=plan.term,
        apr=plan.apr,
        cost_breakdown=lines,
        pros=list(plan.pros),
        cons=list(plan.cons),
    )


def find_plan(vehicle: SuggestedModel, plan_type: str) -> Optional[PaymentPlan]:
    # Si el modelo mandó dos del mismo tipo, gana el primero
    return next((p for p in vehicle.payment_plans if p.plan_type == plan_type), None)


def find_vehicle(response: ApiResponse, name: Optional[str]) -> Optional[SuggestedModel]:
    if name is None:
        return None
    return next((m for m in response.suggested_models if m.name == name), None)


def render_results(
    response: ApiResponse,
    selected: Optional[str] = None,
    term: Optional[int] = None,
    *,
    is_loading: bool = False,
    is_recalculating: bool = False,
    error: Optional[str] = None,
) -> ResultsView:
    """
    Función pura: respuesta + vehículo seleccionado + plazo -> modelo de vista.
    Si el nombre seleccionado no existe, se toma el primer modelo.
    """
    models = response.suggested_models
    vehicle = find_vehicle(response, selected) or (models[0] if models else None)

    if term is None:
        plan = find_plan(vehicle, "Finance") if vehicle else None
        term = plan.term if plan else None

    finance = find_plan(vehicle, "Finance") if vehicle else None
    lease = find_plan(vehicle, "Lease") if vehicle else None

    return ResultsView(
        vehicles=[VehicleTab(name=m.name, selected=vehicle is not None and m.name == vehicle.name) for m in models],
        selected_vehicle=vehicle.name if vehicle else None,
        estimated_msrp=vehicle.estimated_msrp if vehicle else None,
        display_msrp=fmt_usd(vehicle.estimated_msrp) if vehicle else "",
        reasoning=vehicle.reasoning if vehicle else "",
        finance_plan=_plan_view(finance) if finance else None,
        lease_plan=_plan_view(lease) if lease else None,
        terms=[TermOption(term=t, active=(t == term)) for t in TERM_OPTIONS],
        financial_tips=list(response.financial_tips),
        is_loading=is_loading,
        is_recalculating=is_recalculating,
        error=error,
    )
