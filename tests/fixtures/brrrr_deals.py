# tests/fixtures/brrrr_deals.py

from dataclasses import replace

from brrrr.domain.brrrr import BRRRRInputs


def known_inputs_payload() -> dict:
    """
    The reference scenario (camelCase, as a form or API client sends it).
    100k house, 25% down, 25k rehab, rents for 1200, appraises at 150k.
    """
    return dict(
        purchasePrice=100_000,
        downPaymentPercent=25,
        closingCosts=3_000,
        acquisitionFees=1_000,
        holdingCosts=500,
        renovationBudget=25_000,
        contingencyPercent=10,
        rehabDuration=3,
        rehabFinancingRate=7,
        monthlyRent=1_200,
        vacancyRate=5,
        propertyManagement=100,
        insurance=75,
        propertyTax=150,
        maintenance=100,
        arv=150_000,
        refinanceLTV=75,
        newLoanRate=6.5,
        newLoanTerm=30,
        refinanceCosts=3_500,
    )


def known_inputs(**overrides) -> BRRRRInputs:
    """Reference scenario as BRRRRInputs; overrides use snake_case names."""
    return replace(BRRRRInputs.from_dict(known_inputs_payload()), **overrides)


def home_run_payload() -> dict:
    """
    Cheap buy, big ARV: the refinance pays back more than was put in,
    so no capital is left in the deal.
    """
    data = known_inputs_payload()
    data.update(purchasePrice=60_000, renovationBudget=10_000, arv=200_000, refinanceLTV=80)
    return data


def cash_trap_payload() -> dict:
    """
    ARV barely above purchase: the new loan does not even cover the old one.
    """
    data = known_inputs_payload()
    data.update(arv=101_000, refinanceLTV=60)
    return data
