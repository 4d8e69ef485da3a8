# src/brrrr/services/report.py
from __future__ import annotations

import math
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from html import escape

from brrrr.adapters.config import config
from brrrr.domain.brrrr import BRRRRInputs, BRRRRResults

NOT_AVAILABLE = "N/A"
UNTITLED = "Untitled Deal"


def format_currency(amount: float) -> str:
    """Whole US dollars: 1234.5 -> "$1,235", -50 -> "-$50"."""
    if not math.isfinite(amount):
        return NOT_AVAILABLE
    # halves round away from zero
    dollars = int(math.floor(abs(amount) + 0.5))
    if dollars == 0:
        return "$0"
    sign = "-" if amount < 0 else ""
    return f"{sign}${dollars:,}"


def format_percentage(value: float) -> str:
    if not math.isfinite(value):
        return NOT_AVAILABLE
    # halves round away from zero on the exact binary value (12.25 -> "12.3%")
    tenths = Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{tenths:f}%"


def _sections(inputs: BRRRRInputs, results: BRRRRResults) -> list[tuple[str, list[tuple[str, str, float | None]]]]:
    """
    (section title, [(label, formatted value, signed value or None)]).
    The signed value is set only for cash flows, so renderers can color them.
    """
    return [
        ("Executive Summary", [
            ("Total Investment", format_currency(results.total_investment), None),
            ("Equity Created", format_currency(results.equity_created), None),
            ("Cash Out Amount", format_currency(results.cash_out_amount), None),
            ("Capital Recycled", format_percentage(results.capital_recycled), None),
        ]),
        ("Buy Phase", [
            ("Purchase Price", format_currency(inputs.purchase_price), None),
            ("Down Payment",
             f"{format_currency(inputs.down_payment_amount)} ({inputs.down_payment_percent:g}%)", None),
            ("Total Acquisition Cost", format_currency(results.total_acquisition_cost), None),
            ("Initial Cash Needed", format_currency(results.initial_cash_needed), None),
        ]),
        ("Rehab Phase", [
            ("Renovation Budget", format_currency(inputs.renovation_budget), None),
            ("Contingency",
             f"{format_currency(inputs.contingency_amount)} ({inputs.contingency_percent:g}%)", None),
            ("Total Rehab Cost", format_currency(results.total_rehab_cost), None),
            ("Holding Costs", format_currency(results.total_holding_cost), None),
            ("Pre-Stabilization Investment", format_currency(results.pre_stabilization_investment), None),
        ]),
        ("Rent Phase", [
            ("Monthly Rent", format_currency(inputs.monthly_rent), None),
            ("Effective Monthly Rent", format_currency(results.effective_monthly_rent), None),
            ("Operating Expenses", format_currency(results.monthly_operating_expenses), None),
            ("Net Operating Income", format_currency(results.net_operating_income), None),
            ("Pre-Refi Cash Flow", format_currency(results.pre_refinance_cash_flow),
             results.pre_refinance_cash_flow),
            ("Pre-Refi ROI", format_percentage(results.pre_refinance_roi), None),
        ]),
        ("Refinance Phase", [
            ("After Repair Value (ARV)", format_currency(inputs.arv), None),
            ("Refinance LTV", f"{inputs.refinance_ltv:g}%", None),
            ("Max Refinance Loan", format_currency(results.max_refinance_loan), None),
            ("New Monthly Payment", format_currency(results.new_monthly_payment), None),
            ("Post-Refi Cash Flow", format_currency(results.post_refinance_cash_flow),
             results.post_refinance_cash_flow),
            ("Remaining Equity", format_currency(results.remaining_equity), None),
        ]),
        ("Investment Metrics", [
            ("Post-Refinance ROI", format_percentage(results.post_refinance_roi), None),
            ("Rent-to-Value Ratio", format_percentage(results.rent_to_value_ratio), None),
        ]),
    ]


_PHASES = {"Buy Phase", "Rehab Phase", "Rent Phase", "Refinance Phase"}

_STYLE = """
      body { font-family: Arial, sans-serif; margin: 40px; line-height: 1.6; }
      .header { text-align: center; margin-bottom: 30px; border-bottom: 2px solid #333; padding-bottom: 20px; }
      .section { margin-bottom: 30px; }
      .section h2 { color: #333; border-bottom: 1px solid #ccc; padding-bottom: 10px; }
      .metrics { display: grid; grid-template-columns: repeat(2, 1fr); gap: 20px; margin-bottom: 20px; }
      .metric { padding: 15px; border: 1px solid #ddd; border-radius: 5px; }
      .metric-value { font-size: 1.2em; font-weight: bold; color: #2563eb; }
      .positive { color: #16a34a; }
      .negative { color: #dc2626; }
      .phase { margin-bottom: 20px; padding: 15px; background: #f8f9fa; border-radius: 5px; }
      .phase h3 { margin-top: 0; color: #666; }
      @media print { body { margin: 0; } }
"""


def _html_value(text: str, signed: float | None) -> str:
    if signed is None:
        return escape(text)
    css = "positive" if signed >= 0 else "negative"
    return f'<span class="{css}">{escape(text)}</span>'


def _html_metrics(rows: list[tuple[str, str, float | None]]) -> str:
    cells = "".join(
        f'<div class="metric"><div>{escape(label)}</div>'
        f'<div class="metric-value">{_html_value(text, signed)}</div></div>'
        for label, text, signed in rows
    )
    return f'<div class="metrics">{cells}</div>'


def _html_phase(title: str, rows: list[tuple[str, str, float | None]]) -> str:
    lines = "".join(
        f"<p><strong>{escape(label)}:</strong> {_html_value(text, signed)}</p>"
        for label, text, signed in rows
    )
    return f'<div class="phase"><h3>{escape(title)}</h3>{lines}</div>'


def generate_brrrr_report(
    inputs: BRRRRInputs,
    results: BRRRRResults,
    deal_name: str | None,
    notes: str | None = None,
    generated_on: date | None = None,
) -> str:
    """
    Printable HTML report for one deal. Presentation only: every number comes
    from `results` (or is a display-only derivation of `inputs`).
    """
    name = escape(deal_name or UNTITLED)
    title = escape(config.REPORT_TITLE)
    day = (generated_on or date.today()).strftime("%m/%d/%Y")
    sections = _sections(inputs, results)

    summary = sections[0]
    phases = [s for s in sections if s[0] in _PHASES]
    metrics = sections[-1]

    parts = [
        "<!DOCTYPE html>",
        "<html>",
        f"<head><title>BRRRR Deal Report - {name}</title><style>{_STYLE}</style></head>",
        "<body>",
        f'<div class="header"><h1>{title}</h1><h2>{name}</h2><p>Generated on {day}</p></div>',
        f'<div class="section"><h2>{summary[0]}</h2>{_html_metrics(summary[1])}</div>',
        '<div class="section"><h2>Phase Analysis</h2>'
        + "".join(_html_phase(t, rows) for t, rows in phases)
        + "</div>",
    ]
    if notes:
        body = "<br>".join(escape(line) for line in notes.splitlines())
        parts.append(f'<div class="section"><h2>Notes</h2><p>{body}</p></div>')
    parts.append(f'<div class="section"><h2>{metrics[0]}</h2>{_html_metrics(metrics[1])}</div>')
    parts += ["</body>", "</html>"]
    return "\n".join(parts)


def generate_text_report(
    inputs: BRRRRInputs,
    results: BRRRRResults,
    deal_name: str | None,
    notes: str | None = None,
    generated_on: date | None = None,
) -> str:
    """Same content as the HTML report, for terminals."""
    name = deal_name or UNTITLED
    day = (generated_on or date.today()).strftime("%m/%d/%Y")
    out = [config.REPORT_TITLE, name, f"Generated on {day}", ""]

    sections = _sections(inputs, results)
    width = max(len(label) for _, rows in sections for label, _, _ in rows)
    for title, rows in sections:
        if title == "Investment Metrics" and notes:
            out += ["Notes", "-" * len("Notes"), *notes.splitlines(), ""]
        out += [title, "-" * len(title)]
        out += [f"{label:<{width}}  {text}" for label, text, _ in rows]
        out.append("")
    return "\n".join(out).rstrip() + "\n"
