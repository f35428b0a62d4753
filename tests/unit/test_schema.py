"""Tests for eligibility request entities."""

import pytest

from eligibility_service.models.schema import (
    DentalBenefitsRequest,
    Encounter,
    Provider,
    Subscriber,
    parse_benefits,
)
from eligibility_service.utils.errors import ValidationError


@pytest.mark.parametrize(
    "dob, expected",
    [("1987-05-21", "19870521"), ("1987/05/21", "19870521"), ("19870521", "19870521"), (" 1987-05-21 ", "19870521"), ("2024-02-29", "20240229")],
)
def test_dob_normalization(dob, expected):
    subscriber = Subscriber(member_id="1", first_name="John", last_name="Doe", date_of_birth=dob)

    assert subscriber.dob_for_upstream() == expected


@pytest.mark.parametrize("dob", ["05/21/1987", "1987-5-21", "1987-13-01", "1987-02-31", "2023-02-29", "", "yesterday"])
def test_unparseable_dob_raises_validation_error(dob):
    subscriber = Subscriber(member_id="1", first_name="John", last_name="Doe", date_of_birth=dob)

    with pytest.raises(ValidationError):
        subscriber.dob_for_upstream()


def test_upstream_payload_leaves_subscriber_untouched(subscriber):
    payload = subscriber.to_upstream()

    assert payload == {
        "memberId": "0000000000",
        "firstName": "John",
        "lastName": "Doe",
        "dateOfBirth": "19870521",
    }
    assert subscriber.date_of_birth == "1987-05-21"


def test_unknown_party_fields_pass_through():
    subscriber = Subscriber.model_validate(
        {"memberId": "1", "firstName": "A", "lastName": "B", "dateOfBirth": "2000-01-02", "gender": "F"}
    )
    provider = Provider.model_validate({"npi": "1234567890", "taxId": "99-0000000"})

    assert subscriber.to_upstream()["gender"] == "F"
    assert provider.to_upstream() == {"npi": "1234567890", "taxId": "99-0000000"}


def test_encounter_defaults_to_general_dental():
    assert Encounter().to_upstream() == {"serviceTypeCodes": ["35"]}
    assert Encounter(procedure_code="D0120").to_upstream() == {
        "serviceTypeCodes": ["35"],
        "procedureCode": "D0120",
    }


def test_request_allows_missing_parties():
    body = DentalBenefitsRequest.model_validate({"subscriber": None})

    assert body.subscriber is None
    assert body.provider is None


def test_parse_benefits_known_and_opaque():
    parsed = parse_benefits({"benefits": [{"service": "D0120", "extraField": 1}]})

    assert parsed is not None
    assert parsed.benefits[0].service == "D0120"
    assert parse_benefits(None) is None
    assert parse_benefits({"benefitsInformation": []}) is None


def test_parse_benefits_keeps_readable_lines():
    parsed = parse_benefits({"benefits": [{"serviceTypeCode": 35, "percentageCovered": 80}, "stray", 7]})

    assert len(parsed.benefits) == 1
    assert parsed.benefits[0].carries_service_type("35")
