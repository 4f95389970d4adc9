"""
Tests for lead contact field extraction.
"""
from adpulse.services.meta.lead_fields import extract_contact_fields, match_field


def _field(name, value):
    return {"name": name, "values": [value]}


def test_exact_matches():
    contact = extract_contact_fields([
        _field("full_name", "Ana Lopez"),
        _field("email", "ana@example.com"),
        _field("phone_number", "+521234567"),
    ])
    assert contact == {
        "full_name": "Ana Lopez",
        "email": "ana@example.com",
        "phone": "+521234567",
    }


def test_exact_match_is_case_insensitive():
    contact = extract_contact_fields([_field("EMAIL", "a@b.co")])
    assert contact["email"] == "a@b.co"


def test_substring_fallback():
    contact = extract_contact_fields([
        _field("your_whatsapp_number", "555-0101"),
        _field("work_email_address", "x@y.z"),
    ])
    assert contact["phone"] == "555-0101"
    assert contact["email"] == "x@y.z"


def test_exact_pass_beats_substring_pass():
    fields = [_field("phone_number_alt", "111"), _field("phone", "222")]
    assert match_field(fields, ("phone_number", "phone")) == "222"


def test_first_declared_candidate_wins():
    fields = [_field("first_name", "Ana"), _field("full_name", "Ana Lopez")]
    assert extract_contact_fields(fields)["full_name"] == "Ana Lopez"


def test_missing_and_malformed_fields():
    contact = extract_contact_fields([{"name": "city", "values": ["Lima"]}, {"name": "email", "values": []}, "junk"])
    assert contact == {"full_name": None, "email": None, "phone": None}
    assert extract_contact_fields(None)["email"] is None
