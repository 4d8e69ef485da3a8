# src/brrrr/analysis/brrrr_batch.py

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path

import numpy as np
import pandas as pd
from loguru import logger

from brrrr.adapters.storage import read_table, write_table
from brrrr.domain.brrrr import BRRRRInputs, BRRRRResults, wire_name
from brrrr.domain.finance import ACQUISITION_LOAN_MONTHS

INPUT_COLUMNS = [wire_name(f.name) for f in fields(BRRRRInputs)]
RESULT_COLUMNS = [wire_name(f.name) for f in fields(BRRRRResults)]


@dataclass
class BatchSummary:
    """
    Reduction over a batch of deals: how much capital goes in, how much comes
    back at refinance, and the spread of post-refinance ROI.
    """
    n_deals: int
    total_pre_stabilization_investment: float
    total_cash_out: float
    total_left_in_deals: float
    mean_post_refi_roi: float
    p50_post_refi_roi: float
    n_full_recycle: int             # deals with no capital left in
    n_negative_post_refi_cash_flow: int


def _col(df: pd.DataFrame, name: str) -> np.ndarray:
    key = wire_name(name)
    if key in df.columns:
        return df[key].to_numpy(dtype=float)
    if name in df.columns:
        return df[name].to_numpy(dtype=float)
    raise ValueError(f"Missing required column: {key}")


def _payment(principal: np.ndarray, annual_rate_pct: np.ndarray, n_months) -> np.ndarray:
    # Same formula as domain.finance.monthly_payment, no zero-rate special case.
    r = (annual_rate_pct / 100) / 12
    growth = np.power(1 + r, n_months)
    return principal * (r * growth) / (growth - 1)


def compute_brrrr_df(df: pd.DataFrame) -> pd.DataFrame:
    """
    Vectorized calculate_brrrr over a DataFrame, one deal per row.

    Columns may be camelCase (purchasePrice) or snake_case (purchase_price).
    Returns a frame with one column per BRRRRResults field (camelCase), same
    index as df. Degenerate rows produce inf/nan exactly like the scalar engine.
    """
    price = _col(df, "purchase_price")
    down_pct = _col(df, "down_payment_percent")
    closing = _col(df, "closing_costs")
    fees = _col(df, "acquisition_fees")
    holding = _col(df, "holding_costs")
    budget = _col(df, "renovation_budget")
    contingency_pct = _col(df, "contingency_percent")
    duration = _col(df, "rehab_duration")
    rehab_rate = _col(df, "rehab_financing_rate")
    rent = _col(df, "monthly_rent")
    vacancy = _col(df, "vacancy_rate")
    opex = (
        _col(df, "property_management")
        + _col(df, "insurance")
        + _col(df, "property_tax")
        + _col(df, "maintenance")
    )
    arv = _col(df, "arv")
    ltv = _col(df, "refinance_ltv")
    new_rate = _col(df, "new_loan_rate")
    new_term = _col(df, "new_loan_term")
    refi_costs = _col(df, "refinance_costs")

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        # --- Buy ---
        down = (price * down_pct) / 100
        total_acq = price + closing + fees
        initial_cash = down + closing + fees

        # --- Rehab ---
        total_rehab = budget + (budget * contingency_pct) / 100
        total_holding = holding * duration
        pre_stab = initial_cash + total_rehab + total_holding

        # --- Rent ---
        eff_rent = rent * (1 - vacancy / 100)
        noi = eff_rent - opex
        loan = price - down
        pre_cf = noi - _payment(loan, rehab_rate, ACQUISITION_LOAN_MONTHS)
        pre_roi = (pre_cf * 12) / pre_stab * 100

        # --- Refinance ---
        max_loan = (arv * ltv) / 100
        # np.maximum propagates nan, like the scalar floor
        cash_out = np.maximum(0.0, max_loan - loan - refi_costs)
        new_payment = _payment(max_loan, new_rate, new_term * 12)
        post_cf = noi - new_payment
        total_inv = np.maximum(0.0, pre_stab - cash_out)

        post_roi = np.zeros_like(price, dtype=float)
        mask_inv = total_inv > 0
        post_roi[mask_inv] = (post_cf[mask_inv] * 12) / total_inv[mask_inv] * 100

        # --- Summary ---
        capital_recycled = cash_out / pre_stab * 100
        rtv = (rent * 12) / arv * 100

    out = {
        "totalAcquisitionCost": total_acq,
        "initialCashNeeded": initial_cash,
        "totalRehabCost": total_rehab,
        "totalHoldingCost": total_holding,
        "preStabilizationInvestment": pre_stab,
        "effectiveMonthlyRent": eff_rent,
        "monthlyOperatingExpenses": opex,
        "netOperatingIncome": noi,
        "preRefinanceCashFlow": pre_cf,
        "preRefinanceROI": pre_roi,
        "maxRefinanceLoan": max_loan,
        "cashOutAmount": cash_out,
        "newMonthlyPayment": new_payment,
        "postRefinanceCashFlow": post_cf,
        "postRefinanceROI": post_roi,
        "remainingEquity": arv - max_loan,
        "totalInvestment": total_inv,
        "equityCreated": arv - price,
        "capitalRecycled": capital_recycled,
        "rentToValueRatio": rtv,
    }
    return pd.DataFrame(out, index=df.index)[RESULT_COLUMNS]


def summarize_batch(results: pd.DataFrame) -> BatchSummary:
    n = int(len(results))
    if n == 0:
        return BatchSummary(
            n_deals=0,
            total_pre_stabilization_investment=0.0,
            total_cash_out=0.0,
            total_left_in_deals=0.0,
            mean_post_refi_roi=float("nan"),
            p50_post_refi_roi=float("nan"),
            n_full_recycle=0,
            n_negative_post_refi_cash_flow=0,
        )

    roi = results["postRefinanceROI"].to_numpy(dtype=float)
    total_inv = results["totalInvestment"].to_numpy(dtype=float)
    post_cf = results["postRefinanceCashFlow"].to_numpy(dtype=float)

    return BatchSummary(
        n_deals=n,
        total_pre_stabilization_investment=float(np.nansum(results["preStabilizationInvestment"])),
        total_cash_out=float(np.nansum(results["cashOutAmount"])),
        total_left_in_deals=float(np.nansum(total_inv)),
        mean_post_refi_roi=float(np.nanmean(roi)) if np.isfinite(roi).any() else float("nan"),
        p50_post_refi_roi=float(np.nanquantile(roi, 0.5)) if np.isfinite(roi).any() else float("nan"),
        n_full_recycle=int((total_inv == 0).sum()),
        n_negative_post_refi_cash_flow=int((post_cf < 0).sum()),
    )


def run_batch(input_path: str | Path, output_path: str | Path) -> BatchSummary:
    """
    Read deals (CSV/parquet), append result columns, write them out.
    Input columns are kept as-is in front of the results.
    """
    logger.info("Loading batch inputs", path=str(input_path))
    df = read_table(input_path)

    results = compute_brrrr_df(df)
    out = pd.concat([df.reset_index(drop=True), results.reset_index(drop=True)], axis=1)
    written = write_table(out, output_path)

    summary = summarize_batch(results)
    logger.info(
        "Batch complete",
        n_deals=summary.n_deals,
        total_cash_out=summary.total_cash_out,
        n_full_recycle=summary.n_full_recycle,
        output=str(written),
    )
    return summary
