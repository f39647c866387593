# stellar_finance/advisor/prompts.py
from typing import Any, Dict, List

from stellar_finance.schemas import SuggestedModel, UserInput
from stellar_finance.settings import SUGGESTED_MODEL_COUNT
from stellar_finance.texts import FINANCIAL_FORMULAS, PLAN_PROMPT, RECALC_PROMPT

# ------------------------------------------------------------------------------------
# Esquemas de salida estructurada (JSON Schema que viaja en response_format)
# ------------------------------------------------------------------------------------
COST_ITEM_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {
            "type": "string",
            "description": "Name of the cost item (e.g., 'MSRP', 'Down Payment', 'Taxes & Fees', 'Total Amount').",
        },
        "value": {"type": "number", "description": "Value of the cost item."},
    },
    "required": ["name", "value"],
}

PAYMENT_PLAN_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "planType": {
            "type": "string",
            "enum": ["Finance", "Lease"],
            "description": "Type of plan, either 'Finance' or 'Lease'.",
        },
        "monthlyPayment": {
            "type": "number",
            "description": "Estimated monthly payment, rounded to the nearest dollar.",
        },
        "term": {"type": "number", "description": "The length of the plan in months (must match user input)."},
        "apr": {"type": "number", "description": "Estimated Annual Percentage Rate based on user's credit score."},
        "costBreakdown": {
            "type": "array",
            "description": "A breakdown of the costs involved.",
            "items": COST_ITEM_SCHEMA,
        },
        "pros": {
            "type": "array",
            "items": {"type": "string"},
            "description": "A list of 2-3 key benefits (pros) of this payment plan.",
        },
        "cons": {
            "type": "array",
            "items": {"type": "string"},
            "description": "A list of 2-3 key drawbacks (cons) of this payment plan.",
        },
    },
    "required": ["planType", "monthlyPayment", "term", "apr", "costBreakdown", "pros", "cons"],
}

PLAN_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "suggestedModels": {
            "type": "array",
            "description": f"A list of exactly {SUGGESTED_MODEL_COUNT} suggested Toyota models for the user.",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "description": "The name of the Toyota model (e.g., 'Toyota Camry')."},
                    "estimatedMsrp": {"type": "number", "description": "Estimated Manufacturer's Suggested Retail Price."},
                    "reasoning": {
                        "type": "string",
                        "description": "A paragraph explaining why this model is a good fit for the user's lifestyle and budget.",
                    },
                    "paymentPlans": {
                        "type": "array",
                        "description": "A list of two payment plan options: one 'Finance' and one 'Lease'.",
                        "items": PAYMENT_PLAN_SCHEMA,
                    },
                },
                "required": ["name", "estimatedMsrp", "reasoning", "paymentPlans"],
            },
        },
        "financialTips": {
            "type": "array",
            "description": "A list of 3-5 actionable, personalized financial tips for the user.",
            "items": {"type": "string"},
        },
    },
    "required": ["suggestedModels", "financialTips"],
}

# El endpoint exige un objeto en la raíz, así que la lista de planes va envuelta
RECALC_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "paymentPlans": {
            "type": "array",
            "description": "Exactly two payment plans: one 'Finance' and one 'Lease'.",
            "items": PAYMENT_PLAN_SCHEMA,
        },
    },
    "required": ["paymentPlans"],
}


def _money(x: float) -> str:
    # 27450.0 -> "27450"; el prompt lleva el número tal cual, sin separadores
    x = float(x)
    return str(int(x)) if x.is_integer() else str(x)


def financial_formulas(term: int) -> str:
    return FINANCIAL_FORMULAS.format(term=term)


def build_plan_prompt(user_input: UserInput) -> str:
    return PLAN_PROMPT.format(
        monthly_income=user_input.monthly_income,
        credit_score=user_input.credit_score.label,
        down_payment=user_input.down_payment,
        term=user_input.term,
        lifestyle=user_input.lifestyle.label,
        count=SUGGESTED_MODEL_COUNT,
        formulas=financial_formulas(user_input.term),
    )


def build_recalc_prompt(vehicle: SuggestedModel, user_input: UserInput) -> str:
    return RECALC_PROMPT.format(
        vehicle=vehicle.name,
        msrp=_money(vehicle.estimated_msrp),
        monthly_income=user_input.monthly_income,
        credit_score=user_input.credit_score.label,
        down_payment=user_input.down_payment,
        term=user_input.term,
        formulas=financial_formulas(user_input.term),
    )


def build_messages(prompt: str) -> List[Dict[str, str]]:
    """Un solo turno de usuario: el prompt ya trae el rol de asesor."""
    return [{"role": "user", "content": prompt}]


def response_format(name: str, schema: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "json_schema",
        "json_schema": {"name": name, "schema": schema, "strict": False},
    }
