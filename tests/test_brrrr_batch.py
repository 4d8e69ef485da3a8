import math

import pandas as pd
import pytest

from brrrr.analysis.brrrr_batch import (
    INPUT_COLUMNS,
    RESULT_COLUMNS,
    compute_brrrr_df,
    run_batch,
    summarize_batch,
)
from brrrr.domain.brrrr import BRRRRInputs, calculate_brrrr
from fixtures.brrrr_deals import cash_trap_payload, home_run_payload, known_inputs_payload


def _frame(*payloads) -> pd.DataFrame:
    return pd.DataFrame(list(payloads))[INPUT_COLUMNS]


def test_batch_matches_scalar_engine_row_by_row():
    payloads = [known_inputs_payload(), home_run_payload(), cash_trap_payload()]
    out = compute_brrrr_df(_frame(*payloads))

    assert list(out.columns) == RESULT_COLUMNS
    for i, p in enumerate(payloads):
        expected = calculate_brrrr(BRRRRInputs.from_dict(p)).to_dict()
        for col in RESULT_COLUMNS:
            assert out.iloc[i][col] == pytest.approx(expected[col], rel=1e-12, abs=1e-9), col


def test_batch_accepts_snake_case_columns():
    df = pd.DataFrame([BRRRRInputs.from_dict(known_inputs_payload()).__dict__])
    out = compute_brrrr_df(df)
    assert out.iloc[0]["preStabilizationInvestment"] == 58_000


def test_batch_missing_column_is_an_error():
    df = _frame(known_inputs_payload()).drop(columns=["arv"])
    with pytest.raises(ValueError, match="arv"):
        compute_brrrr_df(df)


def test_batch_keeps_degenerate_rows_degenerate():
    zero_arv = known_inputs_payload()
    zero_arv["arv"] = 0
    zero_rate = known_inputs_payload()
    zero_rate["newLoanRate"] = 0

    out = compute_brrrr_df(_frame(zero_arv, zero_rate))

    assert math.isinf(out.iloc[0]["rentToValueRatio"])
    assert math.isnan(out.iloc[1]["newMonthlyPayment"])
    # guarded ROI stays a number
    assert out["postRefinanceROI"].notna().iloc[0]


def test_summary_counts_recycled_and_negative_deals():
    out = compute_brrrr_df(_frame(known_inputs_payload(), home_run_payload(), cash_trap_payload()))
    summary = summarize_batch(out)

    assert summary.n_deals == 3
    assert summary.n_full_recycle == 1
    assert summary.total_cash_out == pytest.approx(out["cashOutAmount"].sum())
    assert summary.total_left_in_deals == pytest.approx(out["totalInvestment"].sum())


def test_summary_of_empty_batch():
    summary = summarize_batch(compute_brrrr_df(pd.DataFrame(columns=INPUT_COLUMNS)))
    assert summary.n_deals == 0
    assert math.isnan(summary.mean_post_refi_roi)


def test_run_batch_writes_inputs_and_results(tmp_path):
    src = tmp_path / "deals.csv"
    dst = tmp_path / "out" / "scored.csv"
    _frame(known_inputs_payload(), home_run_payload()).to_csv(src, index=False)

    summary = run_batch(src, dst)

    written = pd.read_csv(dst)
    assert list(written.columns) == INPUT_COLUMNS + RESULT_COLUMNS
    assert len(written) == 2
    assert summary.n_deals == 2
