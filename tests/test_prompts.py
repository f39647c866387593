import pytest

from stellar_finance.advisor.prompts import (
    PLAN_RESPONSE_SCHEMA,
    RECALC_RESPONSE_SCHEMA,
    build_plan_prompt,
    build_recalc_prompt,
    financial_formulas,
    response_format,
)
from stellar_finance.schemas import CreditScoreRange, Lifestyle, UserInput
from stellar_finance.settings import TERM_OPTIONS


@pytest.mark.parametrize("income, down, term, credit, lifestyle", [
    (5000, 5000, 60, CreditScoreRange.GOOD, Lifestyle.COMMUTER),
    (1000, 0, 36, CreditScoreRange.POOR, Lifestyle.OFFROAD),
    (20000, 50000, 72, CreditScoreRange.EXCELLENT, Lifestyle.PERFORMANCE),
    (7250, 12500, 48, CreditScoreRange.FAIR, Lifestyle.ECO_FRIENDLY),
])
def test_plan_prompt_embeds_every_field(income, down, term, credit, lifestyle):
    ui = UserInput(monthly_income=income, credit_score=credit, down_payment=down, term=term, lifestyle=lifestyle)
    prompt = build_plan_prompt(ui)
    assert f"Monthly Income: ${income}" in prompt
    assert f"Credit Score: {credit.label}" in prompt
    assert f"Down Payment: ${down}" in prompt
    assert f"Preferred Loan/Lease Term: {term} months" in prompt
    assert f'Primary Lifestyle: "{lifestyle.label}"' in prompt
    # las fórmulas llevan el plazo del usuario
    assert f"Use the user's provided term ({term})" in prompt


def test_plan_prompt_asks_for_three_models_and_tips(sample_input):
    prompt = build_plan_prompt(sample_input)
    assert "Exactly 3 distinct and diverse Toyota model suggestions" in prompt
    assert "3-5 actionable, personalized financial tips" in prompt


def test_recalc_prompt_is_scoped_to_vehicle(sample_response, sample_input):
    vehicle = sample_response.suggested_models[1]
    prompt = build_recalc_prompt(vehicle, sample_input.with_term(36))
    assert "'Toyota RAV4 Hybrid' with an estimated MSRP of $33000." in prompt
    assert "New Preferred Loan/Lease Term: 36 months" in prompt
    assert "Credit Score: Good (690-719)" in prompt
    assert "Down Payment: $5000" in prompt
    assert "exactly two updated payment plans" in prompt
    assert financial_formulas(36) in prompt


def test_both_prompts_share_the_formulas_block(sample_response, sample_input):
    for term in TERM_OPTIONS:
        ui = sample_input.with_term(term)
        block = financial_formulas(term)
        assert block in build_plan_prompt(ui)
        assert block in build_recalc_prompt(sample_response.suggested_models[0], ui)


def test_formulas_list_breakdown_names_in_order():
    block = financial_formulas(60)
    finance = ["'Vehicle Price (MSRP)'", "'Principal Loan Amount'", "'Total Interest Paid'",
               "'Down Payment'", "'Total Monthly Payments'", "'Total Cost'"]
    positions = [block.index(n) for n in finance]
    assert positions == sorted(positions)
    assert "'Est. Disposition Fee'" in block and "'Total Lease Cost'" in block


def test_output_schemas():
    assert PLAN_RESPONSE_SCHEMA["required"] == ["suggestedModels", "financialTips"]
    assert "exactly 3" in PLAN_RESPONSE_SCHEMA["properties"]["suggestedModels"]["description"]
    plan = RECALC_RESPONSE_SCHEMA["properties"]["paymentPlans"]["items"]
    assert plan["properties"]["planType"]["enum"] == ["Finance", "Lease"]
    rf = response_format("payment_plans", RECALC_RESPONSE_SCHEMA)
    assert rf["type"] == "json_schema"
    assert rf["json_schema"]["schema"]["type"] == "object"
