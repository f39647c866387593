# tests/test_planner.py
import pytest

from stellar_finance.errors import PlannerBusyError, VehicleNotFound
from stellar_finance.planner import Planner, apply_recalculated_plans
from stellar_finance.schemas import PaymentPlan
from factories import make_plans


def _submitted(run, advisor, sample_input):
    planner = Planner(advisor)
    run(planner.submit(sample_input))
    return planner


def test_submit_makes_one_request_and_selects_first(run, fake_advisor, sample_input):
    planner = Planner(fake_advisor)
    seen = []
    fake_advisor.on_call = lambda: seen.append((planner.is_loading, planner.response, planner.error))

    run(planner.submit(sample_input))

    assert len(fake_advisor.plan_calls) == 1
    assert fake_advisor.plan_calls[0] is sample_input
    # durante la petición: cargando, sin respuesta ni error
    assert seen == [(True, None, None)]
    assert planner.is_loading is False
    assert planner.error is None
    assert planner.selected.name == "Toyota Corolla"
    assert planner.term == 60


def test_submit_failure_sets_error_only(run, fake_advisor, sample_input):
    fake_advisor.fail_plan = "connection reset"
    planner = _submitted(run, fake_advisor, sample_input)
    assert planner.response is None
    assert planner.selected is None
    assert planner.error == "Failed to get financial plan: connection reset"
    assert planner.is_loading is False
    assert planner.view() is None


def test_resubmit_clears_previous_error(run, fake_advisor, sample_input):
    fake_advisor.fail_plan = "boom"
    planner = _submitted(run, fake_advisor, sample_input)
    fake_advisor.fail_plan = None
    run(planner.submit(sample_input))
    assert planner.error is None
    assert planner.response is not None


def test_change_term_recalculates_selected_vehicle_only(run, fake_advisor, sample_input):
    planner = _submitted(run, fake_advisor, sample_input)
    planner.select_vehicle("Toyota RAV4 Hybrid")
    old = planner.response
    old_rav4 = old.suggested_models[1]
    seen = []
    fake_advisor.on_call = lambda: seen.append((planner.is_recalculating, planner.response is old))

    run(planner.change_term(36))

    assert len(fake_advisor.recalc_calls) == 1
    vehicle, ui = fake_advisor.recalc_calls[0]
    assert vehicle.name == "Toyota RAV4 Hybrid"
    assert ui.term == 36
    # los planes viejos siguen mientras se recalcula
    assert seen == [(True, True)]

    new = planner.response
    assert new is not old
    rav4 = new.suggested_models[1]
    assert (rav4.name, rav4.estimated_msrp, rav4.reasoning) == (
        old_rav4.name, old_rav4.estimated_msrp, old_rav4.reasoning)
    assert [p.term for p in rav4.payment_plans] == [36, 36]
    assert new.suggested_models[0] is old.suggested_models[0]
    assert new.suggested_models[2] is old.suggested_models[2]
    assert new.financial_tips == old.financial_tips
    # la respuesta anterior queda intacta
    assert [p.term for p in old_rav4.payment_plans] == [60, 60]

    assert planner.selected is rav4
    assert planner.user_input.term == 36
    assert sample_input.term == 60
    view = planner.view()
    assert view.selected_vehicle == "Toyota RAV4 Hybrid"
    assert [t.term for t in view.terms if t.active] == [36]
    assert view.finance_plan.term == 36


def test_change_term_failure_keeps_old_plans(run, fake_advisor, sample_input):
    planner = _submitted(run, fake_advisor, sample_input)
    old = planner.response
    fake_advisor.fail_recalc = "Expecting value"

    run(planner.change_term(48))

    assert planner.response is old
    assert planner.error == "Failed to recalculate plans: Expecting value"
    assert planner.is_recalculating is False
    assert planner.term == 48
    view = planner.view()
    assert view.error == planner.error
    assert view.finance_plan.term == 60


def test_change_term_without_results_is_noop(run, fake_advisor):
    planner = Planner(fake_advisor)
    run(planner.change_term(36))
    assert fake_advisor.recalc_calls == []
    assert planner.term == 60


def test_busy_planner_rejects_new_work(run, fake_advisor, sample_input):
    planner = _submitted(run, fake_advisor, sample_input)
    planner.is_recalculating = True
    with pytest.raises(PlannerBusyError):
        run(planner.change_term(36))
    with pytest.raises(PlannerBusyError):
        run(planner.submit(sample_input))
    assert fake_advisor.recalc_calls == []
    assert len(fake_advisor.plan_calls) == 1


def test_select_vehicle(run, fake_advisor, sample_input):
    planner = _submitted(run, fake_advisor, sample_input)
    planner.select_vehicle("Toyota Camry")
    assert planner.selected.name == "Toyota Camry"
    with pytest.raises(VehicleNotFound):
        planner.select_vehicle("Toyota Supra")
    assert planner.selected.name == "Toyota Camry"


def test_restore_rebuilds_state(fake_advisor, sample_input, sample_response):
    planner = Planner.restore(fake_advisor, sample_input, sample_response, "Toyota Camry")
    assert planner.selected is sample_response.suggested_models[2]
    assert planner.term == 60
    with pytest.raises(VehicleNotFound):
        Planner.restore(fake_advisor, sample_input, sample_response, "Toyota Supra")


def test_apply_recalculated_plans(sample_response):
    plans = [PaymentPlan.model_validate(p) for p in make_plans(28400, 5000, 72)]
    new, camry = apply_recalculated_plans(sample_response, "Toyota Camry", plans)
    assert camry.payment_plans == plans
    assert new.suggested_models[2] is camry
    assert new.suggested_models[0] is sample_response.suggested_models[0]
    with pytest.raises(VehicleNotFound):
        apply_recalculated_plans(sample_response, "Toyota Supra", plans)
