import pytest

from brrrr.services.deals import (
    DealNotFoundError,
    analyze,
    compare_saved_deals,
    delete_deal,
    get_deal,
    list_deals,
    render_deal_report,
    save_deal,
    update_deal_notes,
)
from brrrr.services.validation import InputValidationError
from fixtures.brrrr_deals import cash_trap_payload, known_inputs, known_inputs_payload


def test_analyze_parses_validates_and_computes():
    inputs, results = analyze(known_inputs_payload())
    assert inputs == known_inputs()
    assert results.pre_stabilization_investment == 58_000


def test_analyze_rejects_out_of_range_unless_told_not_to():
    payload = known_inputs_payload()
    payload["newLoanRate"] = 0

    # 0 is inside the 0-15 rule, so this passes validation but yields a nan payment
    _, results = analyze(payload)
    assert results.new_monthly_payment != results.new_monthly_payment

    payload["arv"] = 0
    with pytest.raises(InputValidationError):
        analyze(payload)

    _, raw = analyze(payload, validate=False)
    assert raw.max_refinance_loan == 0


def test_save_new_deal_recomputes_results(memory_repo):
    deal = save_deal(memory_repo, "  Maple Ave ", known_inputs_payload(), notes="nice block")

    assert deal["deal_name"] == "Maple Ave"
    assert deal["results"]["preStabilizationInvestment"] == 58_000
    assert deal["notes"] == "nice block"
    assert get_deal(memory_repo, deal["id"]) == deal


def test_save_requires_a_name(memory_repo):
    with pytest.raises(ValueError, match="deal name"):
        save_deal(memory_repo, "", known_inputs_payload())
    assert list_deals(memory_repo) == []


def test_save_with_id_updates_existing(memory_repo):
    deal = save_deal(memory_repo, "Maple Ave", known_inputs_payload())

    updated = save_deal(memory_repo, "Maple Ave", cash_trap_payload(), deal_id=deal["id"])

    assert updated["id"] == deal["id"]
    assert updated["results"]["cashOutAmount"] == 0
    assert len(list_deals(memory_repo)) == 1


def test_save_with_unknown_id_raises(memory_repo):
    with pytest.raises(DealNotFoundError):
        save_deal(memory_repo, "Ghost", known_inputs_payload(), deal_id=77)


def test_notes_delete_and_missing_ids(memory_repo):
    deal = save_deal(memory_repo, "Maple Ave", known_inputs_payload())

    assert update_deal_notes(memory_repo, deal["id"], "under contract")["notes"] == "under contract"

    delete_deal(memory_repo, deal["id"])
    with pytest.raises(DealNotFoundError):
        get_deal(memory_repo, deal["id"])
    with pytest.raises(DealNotFoundError):
        delete_deal(memory_repo, deal["id"])
    with pytest.raises(DealNotFoundError):
        update_deal_notes(memory_repo, deal["id"], "x")


def test_render_report_from_saved_deal(memory_repo):
    deal = save_deal(memory_repo, "Maple Ave", known_inputs_payload(), notes="roof is new")

    html = render_deal_report(memory_repo, deal["id"])
    text = render_deal_report(memory_repo, deal["id"], fmt="text")

    assert "<h2>Maple Ave</h2>" in html and "roof is new" in html
    assert "Maple Ave" in text and "$112,500" in text


def test_compare_saved_deals_dedupes_ids(memory_repo):
    a = save_deal(memory_repo, "A", known_inputs_payload())
    b = save_deal(memory_repo, "B", cash_trap_payload())

    cmp = compare_saved_deals(memory_repo, [a["id"], b["id"], a["id"]])
    assert cmp.deal_ids == [a["id"], b["id"]]

    with pytest.raises(ValueError):
        compare_saved_deals(memory_repo, [a["id"], a["id"]])
    with pytest.raises(DealNotFoundError):
        compare_saved_deals(memory_repo, [a["id"], 999])
