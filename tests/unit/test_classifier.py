"""Tests for the general-coverage classifier."""

import pytest

from eligibility_service.models.schema import BenefitsResult
from eligibility_service.services.classifier import is_covered_in_general


@pytest.mark.parametrize("general", [None, {"benefits": []}, {}, {"benefits": None}])
def test_absent_or_empty_general_result_is_not_coverage(general):
    assert is_covered_in_general(general, "D0120") is False


@pytest.mark.parametrize(
    "general",
    [
        "not a payload",
        ["benefits"],
        {"benefits": "35"},
        {"benefits": ["Dental - Preventive"]},
        {"benefits": [{"serviceTypeCodes": "35"}]},
    ],
)
def test_opaque_payloads_fail_safe(general):
    assert is_covered_in_general(general, "D0120") is False


def test_general_dental_service_type_covers_every_code():
    general = {"benefits": [{"serviceTypeCode": "35", "status": "active"}]}

    assert is_covered_in_general(general, "D0120") is True
    assert is_covered_in_general(general, "D6010") is True


def test_service_type_list_marker_counts():
    general = {"benefits": [{"serviceTypeCodes": ["30", "35"], "status": "active"}]}

    assert is_covered_in_general(general, "D2740") is True


def test_service_label_matches_code_case_insensitively():
    general = {"benefits": [{"service": "d1110", "percentageCovered": "100"}]}

    assert is_covered_in_general(general, "D1110") is True
    assert is_covered_in_general(general, "D0120") is False


def test_unrelated_benefit_lines_do_not_cover():
    general = {
        "benefits": [
            {"service": "Dental - Preventive", "serviceTypeCode": "23"},
            {"serviceTypeCodes": ["30"]},
        ]
    }

    assert is_covered_in_general(general, "D0120") is False


def test_accepts_parsed_benefits_model():
    general = BenefitsResult.model_validate({"benefits": [{"serviceTypeCode": "35"}]})

    assert is_covered_in_general(general, "D0120") is True


def test_unknown_upstream_fields_are_ignored_not_rejected():
    general = {
        "benefits": [{"serviceTypeCode": "35", "inPlanNetworkIndicator": "Y", "benefitAmount": "1500"}],
        "planInformation": {"groupNumber": "G1"},
    }

    assert is_covered_in_general(general, "D0120") is True


@pytest.mark.parametrize(
    "general",
    [
        {"benefits": [{"serviceTypeCode": "35", "percentageCovered": 100}]},
        {"benefits": [{"serviceTypeCode": "35", "copayAmount": 25}]},
        {"benefits": ["Dental - Preventive", {"serviceTypeCode": "35"}]},
        {"benefits": [{"service": "Vision", "copayAmount": 0.0}, {"serviceTypeCode": "35"}]},
        {"benefits": [{"serviceTypeCode": 35}]},
        {"benefits": [{"serviceTypeCodes": [30, 35]}]},
    ],
)
def test_numeric_fields_and_stray_lines_do_not_hide_dental_marker(general):
    assert is_covered_in_general(general, "D0120") is True


def test_unreadable_line_is_skipped_not_fatal():
    general = {"benefits": [{"serviceTypeCodes": {"bad": "shape"}}, {"service": "D2140"}]}

    assert is_covered_in_general(general, "D2140") is True
    assert is_covered_in_general(general, "D0120") is False
