"""Tests for the synthetic fallback report."""

from eligibility_service.models.schema import FallbackReport, ProcedureDescriptor
from eligibility_service.services.catalog import ProcedureCatalog, load_default_catalog
from eligibility_service.services.fallback import build_fallback_report
from eligibility_service.utils.error_codes import FallbackReason


def test_general_section_has_three_tiers(small_catalog):
    report = build_fallback_report(small_catalog)

    tiers = report.general["benefits"]
    assert [tier["service"] for tier in tiers] == ["Dental - Preventive", "Dental - Basic", "Dental - Major"]
    assert [tier["percentageCovered"] for tier in tiers] == ["100", "80", "50"]
    assert [tier["copayAmount"] for tier in tiers] == ["$0", "$25", "$100"]


def test_report_is_marked_synthetic(small_catalog):
    report = build_fallback_report(small_catalog, reason=FallbackReason.TRANSPORT_ERROR)

    assert isinstance(report, FallbackReport)
    assert report.synthetic is True
    assert report.fallback_reason == FallbackReason.TRANSPORT_ERROR
    assert report.model_dump(by_alias=True)["synthetic"] is True


def test_preventive_categories_get_full_coverage():
    catalog = ProcedureCatalog(
        [
            ProcedureDescriptor(code="D0120", description="Periodic oral evaluation", category="Preventive"),
            ProcedureDescriptor(code="D1351", description="Sealant", category="preventive care"),
            ProcedureDescriptor(code="D2140", description="Amalgam", category="Restorative"),
            ProcedureDescriptor(code="D3310", description="Root canal", category="Endodontics"),
        ]
    )

    report = build_fallback_report(catalog)

    assert [p.benefit["percentageCovered"] for p in report.procedures] == ["100", "100", "80", "80"]


def test_capped_to_first_twenty_in_catalog_order():
    catalog = load_default_catalog()
    assert len(catalog) > 20

    report = build_fallback_report(catalog)

    assert len(report.procedures) == 20
    assert [p.code for p in report.procedures] == catalog.codes()[:20]


def test_custom_limit_and_empty_catalog(small_catalog):
    assert len(build_fallback_report(small_catalog, limit=2).procedures) == 2
    assert build_fallback_report(ProcedureCatalog([])).procedures == []


def test_deterministic_and_independent(small_catalog):
    first = build_fallback_report(small_catalog)
    first.general["benefits"][0]["percentageCovered"] = "0"

    second = build_fallback_report(small_catalog)

    assert second.general["benefits"][0]["percentageCovered"] == "100"
    assert build_fallback_report(small_catalog) == second
