import pytest

from document_templates import labels


@pytest.mark.parametrize(
    ("segments", "expected"),
    [
        ((), "Content"),
        (("chairman",), "Chairman"),
        (("agendas", 1, "title"), "Agenda 2 > Title"),
        (("agendas", 0), "Agenda 1"),
        (("table_config", "columns", 0, "label"), "Table > Column 1 > Label"),
        (("labels", "agenda_title_template"), "Labels > Agenda title template"),
        (("sections", 2, "sub", 0, "text"), "Section 3 > Item 1 > Text"),
        (("custom_field", 4), "custom_field > #5"),
    ],
)
def test_display_path(segments, expected):
    assert labels.display_path(segments) == expected
