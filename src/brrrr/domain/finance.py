import math
from dataclasses import dataclass

# The acquisition loan is always amortized over 30 years, whatever the refi term.
ACQUISITION_LOAN_MONTHS = 30 * 12


def ieee_div(numerator: float, denominator: float) -> float:
    """
    Float division that follows IEEE-754 instead of raising ZeroDivisionError:
      x / 0  -> +/-inf (sign from both operands)
      0 / 0  -> nan
    """
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def _growth(r: float, n: float) -> float:
    """(1 + r) ** n, but inf on overflow and nan where the result would be complex."""
    base = 1 + r
    if base < 0 and not float(n).is_integer():
        return math.nan
    try:
        return base ** n
    except OverflowError:
        return math.inf
    except ZeroDivisionError:
        # 0.0 ** negative
        return math.inf


def monthly_payment(principal: float, annual_rate_pct: float, n_months: float) -> float:
    """
    Standard fixed-rate amortization formula:
    M = P * [ r(1+r)^n / ((1+r)^n - 1) ]
    P = loan principal
    r = monthly rate, from an annual rate given in percent (7 means 7%)
    n = number of payments (months)

    No special case for r == 0: the formula degenerates to 0/0 and the
    payment is nan, same as every other unguarded ratio in the BRRRR model.
    """
    r = (annual_rate_pct / 100) / 12
    growth = _growth(r, n_months)
    return ieee_div(principal * (r * growth), growth - 1)


@dataclass(frozen=True)
class TraditionalResult:
    monthly_payment: float
    net_cash_flow: float
    cash_on_cash_return: float  # percent, 2 decimals
    cap_rate: float             # percent, 2 decimals
    profitable: bool


def _round_half_up(x: float) -> float:
    # halves go up, not to even
    if not math.isfinite(x):
        return x
    return float(math.floor(x + 0.5))


def calculate_traditional(
    property_price: float,
    down_payment: float,
    monthly_rent: float,
    operating_expenses: float,
) -> TraditionalResult:
    """
    Quick buy-and-hold check, no rehab or refinance.

    The mortgage is a flat 0.5% of the loan per month (roughly a 6% interest-only
    note), which is what the quick calculator has always shown. Cash amounts are
    rounded to whole dollars, ratios to 2 decimals.
    Callers validate first (see services.validation.validate_traditional).
    """
    loan_amount = property_price - down_payment
    payment = loan_amount * 0.005
    net_cash_flow = monthly_rent - payment - operating_expenses
    coc = ieee_div(net_cash_flow * 12, down_payment) * 100
    cap_rate = ieee_div((monthly_rent * 12) - (operating_expenses * 12), property_price) * 100

    return TraditionalResult(
        monthly_payment=_round_half_up(payment),
        net_cash_flow=_round_half_up(net_cash_flow),
        cash_on_cash_return=_round_half_up(coc * 100) / 100,
        cap_rate=_round_half_up(cap_rate * 100) / 100,
        profitable=net_cash_flow > 0,
    )
