"""
Fund-assembly template catalogue.

Which template types belong to member assemblies, what a valid content blob
looks like for the editable ones, the seed content each family starts from,
and sample data used for previews.

The version store itself does not look inside content; the save endpoint runs
`validate_content` before handing the blob over.
"""

from __future__ import annotations

import copy
from typing import Any

ASSEMBLY_TEMPLATE_TYPES = (
    "formation_agenda",
    "formation_member_list",
    "formation_official_letter",
    "formation_minutes",
    "fund_registration_application",
    "investment_certificate",
    "seal_registration",
    "member_consent",
    "personal_info_consent",
    "special_agenda",
    "special_minutes",
    "regular_agenda",
    "regular_minutes",
    "dissolution_agenda",
    "dissolution_minutes",
)

MEMBER_LIST_REQUIRED_COLUMNS = ("no", "name", "identifier", "address", "phone", "units")

_DEFAULT_CONTENT: dict[str, dict[str, Any]] = {
    "formation_agenda": {
        "title_template": "${fund_name} Formation Assembly",
        "labels": {
            "date": "Date:",
            "chairman": "Chairman:",
            "agendas_section": "Agenda",
            "agenda_title_template": "(Agenda No. ${index}) ${title}",
        },
        "chairman": "",
        "agendas": [
            {
                "title": "Approval of the partnership agreement",
                "content": "Please refer to the attached partnership agreement.",
            },
            {
                "title": "Approval of the business plan",
                "content": (
                    "The fund invests in promising small and venture companies to realise "
                    "investment returns and support the venture ecosystem.\n\n"
                    "Target sectors: IT, bio, manufacturing, services and other high-growth companies\n"
                    "Investment style: direct and indirect investment"
                ),
            },
        ],
        "footer_message": "We kindly ask the members to approve the agenda above.",
    },
    "formation_member_list": {
        "title": "Member Register",
        "table_config": {
            "columns": [
                {"key": "no", "label": "No.", "width": 30, "align": "center"},
                {"key": "name", "label": "Member", "width": 80, "align": "center"},
                {
                    "key": "identifier",
                    "label": "Date of birth\n(Business reg. no.)",
                    "width": 85,
                    "align": "center",
                    "line_gap": -2,
                },
                {"key": "address", "label": "Address", "width": 165, "align": "center"},
                {"key": "phone", "label": "Phone", "width": 75, "align": "center"},
                {"key": "units", "label": "Units", "width": 60, "align": "center"},
            ],
        },
        "footer_labels": {
            "gp_prefix": "General Partner",
            "seal_text": "(Fund seal)",
        },
    },
}

_DEFAULT_DESCRIPTIONS = {
    "formation_agenda": "Initial formation agenda. Review the agenda items and edit as needed.",
    "formation_member_list": "Initial member register layout. Generated from the fund's member data.",
}

_SAMPLE_DATA: dict[str, dict[str, Any]] = {
    "formation_agenda": {
        "assembly_date": "2024-12-31",
    },
    "formation_member_list": {
        "fund_name": "Sample Investment Fund",
        "assembly_date": "2024-12-31",
        "gps": [
            {
                "id": "gp-1",
                "name": "Sample Ventures",
                "representative": "Jane Doe",
                "entity_type": "corporate",
            },
        ],
        "members": [
            {
                "name": "Jane Doe",
                "entity_type": "individual",
                "birth_date": "1980-01-01",
                "address": "123 Main Street, Seoul",
                "phone": "010-1234-5678",
                "units": 100,
            },
            {
                "name": "John Roe",
                "entity_type": "individual",
                "birth_date": "1985-05-15",
                "address": "456 Station Road, Seoul",
                "phone": "010-2345-6789",
                "units": 50,
            },
            {
                "name": "Startup Inc.",
                "entity_type": "corporate",
                "business_number": "123-45-67890",
                "address": "789 Tech Avenue, Seoul",
                "phone": "02-1234-5678",
                "units": 200,
            },
        ],
    },
}


def default_content(template_type: str) -> dict[str, Any] | None:
    content = _DEFAULT_CONTENT.get(template_type)
    return copy.deepcopy(content) if content is not None else None


def default_description(template_type: str) -> str:
    return _DEFAULT_DESCRIPTIONS.get(template_type, "Initial version.")


def seedable_types() -> list[str]:
    return list(_DEFAULT_CONTENT)


def sample_data(template_type: str) -> dict[str, Any]:
    return copy.deepcopy(_SAMPLE_DATA.get(template_type, {}))


def validate_content(template_type: str, content: Any) -> str | None:
    """
    Return an error message for invalid content, or None when it is acceptable.
    """
    if not isinstance(content, dict):
        return "Template content must be an object."

    if template_type == "formation_agenda":
        return _validate_formation_agenda(content)
    if template_type == "formation_member_list":
        return _validate_member_list(content)
    return None


def _validate_formation_agenda(content: dict[str, Any]) -> str | None:
    if not content.get("title_template"):
        return "A title template is required."

    if not isinstance(content.get("labels"), dict):
        return "Label definitions are required."

    agendas = content.get("agendas")
    if not isinstance(agendas, list):
        return "An agenda list is required."

    for i, agenda in enumerate(agendas, start=1):
        if not isinstance(agenda, dict) or not agenda.get("title"):
            return f"Agenda {i} needs a title."

    return None


def _validate_member_list(content: dict[str, Any]) -> str | None:
    if not content.get("title"):
        return "A document title is required."

    table_config = content.get("table_config")
    if not isinstance(table_config, dict) or "columns" not in table_config:
        return "A table structure definition is required."

    columns = table_config["columns"]
    if not isinstance(columns, list):
        return "Table columns must be a list."

    column_keys = {col.get("key") for col in columns if isinstance(col, dict)}
    for required in MEMBER_LIST_REQUIRED_COLUMNS:
        if required not in column_keys:
            return f"Required column '{required}' is missing."

    if not content.get("footer_labels"):
        return "Footer labels are required."

    return None
