"""
Lead contact extraction from Meta lead-form field_data.

Form field names are chosen by each advertiser, so matching is a
heuristic and lossy two-pass search over candidate keys:
  1. case-insensitive exact match
  2. substring match
Candidates are tried in declaration order and the first match wins, so
when both "full_name" and "first_name" are present "full_name" is used.
"""
from typing import Any, Dict, List, Optional, Sequence

NAME_FIELDS = ("full_name", "name", "first_name", "nombre_completo", "nombre")
EMAIL_FIELDS = ("email", "correo_electronico", "correo", "e-mail")
PHONE_FIELDS = ("phone_number", "phone", "telefono", "celular", "whatsapp", "mobile")


def _first_value(field: Dict[str, Any]) -> Optional[str]:
    values = field.get("values")
    if isinstance(values, list) and values:
        value = values[0]
        return str(value) if value not in (None, "") else None
    return None


def match_field(field_data: Optional[List[Dict[str, Any]]], candidates: Sequence[str]) -> Optional[str]:
    """Return the first value whose field name matches one of the candidates"""
    fields = [
        (str(f.get("name", "")).lower(), f)
        for f in field_data or []
        if isinstance(f, dict)
    ]

    # Pass 1: exact (case-insensitive)
    for candidate in candidates:
        for name, field in fields:
            if name == candidate:
                value = _first_value(field)
                if value:
                    return value

    # Pass 2: substring
    for candidate in candidates:
        for name, field in fields:
            if candidate in name:
                value = _first_value(field)
                if value:
                    return value

    return None


def extract_contact_fields(field_data: Optional[List[Dict[str, Any]]]) -> Dict[str, Optional[str]]:
    """Best-effort name/email/phone from a lead's field_data"""
    return {
        "full_name": match_field(field_data, NAME_FIELDS),
        "email": match_field(field_data, EMAIL_FIELDS),
        "phone": match_field(field_data, PHONE_FIELDS),
    }
