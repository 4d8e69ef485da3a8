import math

import pytest

from brrrr.domain.brrrr import BRRRRInputs, BRRRRResults, calculate_brrrr
from fixtures.brrrr_deals import (
    cash_trap_payload,
    home_run_payload,
    known_inputs,
    known_inputs_payload,
)


def _amortized(principal, annual_pct, months):
    r = annual_pct / 100 / 12
    return principal * r * (1 + r) ** months / ((1 + r) ** months - 1)


def test_known_scenario_values():
    inputs = known_inputs()
    res = calculate_brrrr(inputs)

    assert inputs.down_payment_amount == 25_000
    assert res.initial_cash_needed == 29_000
    assert res.total_acquisition_cost == 104_000
    assert res.total_rehab_cost == 27_500
    assert res.total_holding_cost == 1_500
    assert res.pre_stabilization_investment == 58_000
    assert res.effective_monthly_rent == pytest.approx(1_140)
    assert res.monthly_operating_expenses == 425
    assert res.net_operating_income == pytest.approx(715)
    assert res.max_refinance_loan == 112_500
    assert res.equity_created == 50_000
    assert res.rent_to_value_ratio == pytest.approx(9.6)


def test_known_scenario_loan_dependent_values():
    res = calculate_brrrr(known_inputs())

    existing = _amortized(75_000, 7, 360)
    new = _amortized(112_500, 6.5, 360)

    assert existing == pytest.approx(498.98, abs=0.01)
    assert new == pytest.approx(711.08, abs=0.01)

    assert res.pre_refinance_cash_flow == pytest.approx(715 - existing)
    assert res.pre_refinance_roi == pytest.approx((715 - existing) * 12 / 58_000 * 100)

    # 112.5k new loan - 75k old loan - 3.5k costs
    assert res.cash_out_amount == pytest.approx(34_000)
    assert res.new_monthly_payment == pytest.approx(new)
    assert res.post_refinance_cash_flow == pytest.approx(715 - new)
    assert res.remaining_equity == 37_500
    assert res.total_investment == pytest.approx(24_000)
    assert res.post_refinance_roi == pytest.approx((715 - new) * 12 / 24_000 * 100)
    assert res.capital_recycled == pytest.approx(34_000 / 58_000 * 100)


def test_same_inputs_give_identical_results():
    a = calculate_brrrr(known_inputs())
    b = calculate_brrrr(known_inputs())
    assert a == b


def test_rehab_financing_rate_drives_the_acquisition_loan_only():
    base = calculate_brrrr(known_inputs())
    bigger_rehab = calculate_brrrr(known_inputs(renovation_budget=60_000))
    higher_rate = calculate_brrrr(known_inputs(rehab_financing_rate=10))

    # renovation spend is cash, not financed: payment unchanged
    assert bigger_rehab.pre_refinance_cash_flow == base.pre_refinance_cash_flow
    # the rate moves the payment on price - down payment
    assert higher_rate.pre_refinance_cash_flow == pytest.approx(715 - _amortized(75_000, 10, 360))
    # and nothing after the refinance
    assert higher_rate.post_refinance_cash_flow == base.post_refinance_cash_flow


def test_cash_out_exceeding_investment_pins_roi_to_zero():
    res = calculate_brrrr(BRRRRInputs.from_dict(home_run_payload()))

    assert res.cash_out_amount > res.pre_stabilization_investment
    assert res.total_investment == 0.0
    assert res.post_refinance_roi == 0.0
    assert res.capital_recycled > 100


def test_refinance_short_of_old_loan_never_goes_negative():
    res = calculate_brrrr(BRRRRInputs.from_dict(cash_trap_payload()))

    assert res.max_refinance_loan < 75_000 + 3_500
    assert res.cash_out_amount == 0.0
    assert res.capital_recycled == 0.0
    assert res.total_investment == res.pre_stabilization_investment


def test_zero_arv_leaves_unguarded_ratios_infinite():
    res = calculate_brrrr(known_inputs(arv=0.0))

    assert math.isinf(res.rent_to_value_ratio) and res.rent_to_value_ratio > 0
    assert res.max_refinance_loan == 0.0
    assert res.equity_created == -100_000


def test_zero_investment_leaves_pre_refi_ratios_unguarded():
    inputs = known_inputs(
        down_payment_percent=0.0,
        closing_costs=0.0,
        acquisition_fees=0.0,
        renovation_budget=0.0,
        holding_costs=0.0,
    )
    res = calculate_brrrr(inputs)

    assert res.pre_stabilization_investment == 0.0
    assert math.isinf(res.pre_refinance_roi)
    # 9k cash out over nothing invested
    assert math.isinf(res.capital_recycled)
    assert res.total_investment == 0.0
    assert res.post_refinance_roi == 0.0


def test_zero_interest_rate_is_not_special_cased():
    res = calculate_brrrr(known_inputs(new_loan_rate=0.0))

    assert math.isnan(res.new_monthly_payment)
    assert math.isnan(res.post_refinance_cash_flow)
    # totals that do not depend on the payment are still computed
    assert res.cash_out_amount == pytest.approx(34_000)


def test_negative_and_extreme_inputs_do_not_raise():
    inputs = known_inputs(
        purchase_price=-50_000.0,
        vacancy_rate=150.0,
        rehab_financing_rate=-2_400.0,  # monthly rate -2 -> negative growth base
        new_loan_term=40.0,
        new_loan_rate=1e6,  # (1 + r) ** 480 overflows
    )
    res = calculate_brrrr(inputs)
    assert isinstance(res, BRRRRResults)
    assert res.effective_monthly_rent < 0


def test_results_round_trip_through_wire_names():
    res = calculate_brrrr(known_inputs())
    wire = res.to_dict()

    assert set(wire) >= {"preRefinanceROI", "postRefinanceROI", "rentToValueRatio", "cashOutAmount"}
    assert BRRRRResults.from_dict(wire) == res


def test_result_keys_are_the_published_wire_names():
    assert set(calculate_brrrr(known_inputs()).to_dict()) == {
        "totalAcquisitionCost",
        "initialCashNeeded",
        "totalRehabCost",
        "totalHoldingCost",
        "preStabilizationInvestment",
        "effectiveMonthlyRent",
        "monthlyOperatingExpenses",
        "netOperatingIncome",
        "preRefinanceCashFlow",
        "preRefinanceROI",
        "maxRefinanceLoan",
        "cashOutAmount",
        "newMonthlyPayment",
        "postRefinanceCashFlow",
        "postRefinanceROI",
        "remainingEquity",
        "totalInvestment",
        "equityCreated",
        "capitalRecycled",
        "rentToValueRatio",
    }


def test_input_keys_are_the_published_wire_names():
    wire = known_inputs().to_dict()
    assert set(wire) == set(known_inputs_payload())
    assert "refinanceLTV" in wire


def test_inputs_accept_camel_or_snake_case():
    camel = BRRRRInputs.from_dict(known_inputs_payload())
    snake = BRRRRInputs.from_dict({k: v for k, v in camel.__dict__.items()})

    assert camel == snake
    assert camel.to_dict()["refinanceLTV"] == 75


def test_inputs_missing_field_is_reported_by_wire_name():
    data = known_inputs_payload()
    del data["refinanceLTV"]
    with pytest.raises(ValueError, match="refinanceLTV"):
        BRRRRInputs.from_dict(data)
