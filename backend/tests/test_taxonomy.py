from uuid import uuid4

import pytest

from app.core.errors import (
    DuplicateField,
    InvalidFieldValue,
    InvalidSelection,
    MissingRequiredField,
    UnknownField,
)
from app.models import CustomFieldDefinition, FieldType
from app.schemas.ticket import CustomFieldInput
from app.services.taxonomy import (
    BoolValue,
    DateValue,
    NumberValue,
    TextValue,
    coerce_field_value,
    scope_definitions,
    validate_custom_fields,
    validate_selection,
)


def definition(field_type, options=None, label="Field"):
    return CustomFieldDefinition(
        category_id=uuid4(),
        field_key="field",
        label=label,
        field_type=field_type.value,
        options=options or [],
    )


def os_value(taxonomy, value):
    return CustomFieldInput(field_definition_id=taxonomy["operating_system"].id, value=value)


def test_selection_must_belong_to_category(session, taxonomy):
    with pytest.raises(InvalidSelection):
        validate_selection(session, taxonomy["software"].id, taxonomy["laptop"].id)


def test_selection_rejects_inactive_category(session, taxonomy):
    taxonomy["hardware"].is_active = False
    session.add(taxonomy["hardware"])
    session.commit()

    with pytest.raises(InvalidSelection):
        validate_selection(session, taxonomy["hardware"].id, taxonomy["laptop"].id)


def test_selection_rejects_unknown_subcategory(session, taxonomy):
    with pytest.raises(InvalidSelection):
        validate_selection(session, taxonomy["hardware"].id, uuid4())


def test_scope_includes_category_wide_and_subcategory_fields(session, taxonomy):
    laptop_fields = scope_definitions(session, taxonomy["hardware"].id, taxonomy["laptop"].id)
    printer_fields = scope_definitions(session, taxonomy["hardware"].id, taxonomy["printer"].id)

    assert [field.field_key for field in laptop_fields] == ["operating_system", "asset_tag"]
    assert [field.field_key for field in printer_fields] == ["asset_tag"]


def test_scope_skips_inactive_definitions(session, taxonomy):
    taxonomy["asset_tag"].is_active = False
    session.add(taxonomy["asset_tag"])
    session.commit()

    fields = scope_definitions(session, taxonomy["hardware"].id, taxonomy["printer"].id)
    assert fields == []


def test_valid_fields_are_normalized(session, taxonomy):
    normalized = validate_custom_fields(
        session,
        taxonomy["hardware"].id,
        taxonomy["laptop"].id,
        [
            os_value(taxonomy, "Windows"),
            CustomFieldInput(field_definition_id=taxonomy["asset_tag"].id, value="  LT-0042 "),
        ],
    )

    assert [(item.text_repr, item.json_repr) for item in normalized] == [
        ("Windows", "Windows"),
        ("LT-0042", "LT-0042"),
    ]


def test_missing_required_select_fails(session, taxonomy):
    with pytest.raises(MissingRequiredField):
        validate_custom_fields(session, taxonomy["hardware"].id, taxonomy["laptop"].id, [])


def test_blank_required_value_counts_as_missing(session, taxonomy):
    with pytest.raises(MissingRequiredField):
        validate_custom_fields(
            session, taxonomy["hardware"].id, taxonomy["laptop"].id, [os_value(taxonomy, "  ")]
        )


def test_select_value_outside_options_fails(session, taxonomy):
    with pytest.raises(InvalidFieldValue):
        validate_custom_fields(
            session, taxonomy["hardware"].id, taxonomy["laptop"].id, [os_value(taxonomy, "BeOS")]
        )


def test_field_from_other_scope_is_unknown(session, taxonomy):
    with pytest.raises(UnknownField):
        validate_custom_fields(
            session, taxonomy["hardware"].id, taxonomy["printer"].id, [os_value(taxonomy, "Windows")]
        )


def test_duplicate_field_submission_fails(session, taxonomy):
    with pytest.raises(DuplicateField):
        validate_custom_fields(
            session,
            taxonomy["hardware"].id,
            taxonomy["laptop"].id,
            [os_value(taxonomy, "Windows"), os_value(taxonomy, "Linux")],
        )


def test_number_coercion():
    field = definition(FieldType.NUMBER)

    assert coerce_field_value(field, 3) == NumberValue(3.0)
    assert coerce_field_value(field, " 2.5 ").text == "2.5"
    assert coerce_field_value(field, "4").text == "4"
    for bad in ("four", True, "nan", "inf", [1], 10**400, "1" + "0" * 400):
        with pytest.raises(InvalidFieldValue):
            coerce_field_value(field, bad)


def test_date_coercion_keeps_calendar_date():
    field = definition(FieldType.DATE)

    assert coerce_field_value(field, "2024-03-05") == DateValue("2024-03-05")
    assert coerce_field_value(field, "2024-03-05T10:30:00") == DateValue("2024-03-05")
    with pytest.raises(InvalidFieldValue):
        coerce_field_value(field, "05/03/2024")


def test_checkbox_coercion():
    field = definition(FieldType.CHECKBOX)

    assert coerce_field_value(field, True) == BoolValue(True)
    assert coerce_field_value(field, "FALSE") == BoolValue(False)
    assert coerce_field_value(field, True).text == "true"
    with pytest.raises(InvalidFieldValue):
        coerce_field_value(field, "yes")


def test_text_and_select_coercion():
    assert coerce_field_value(definition(FieldType.TEXT), " hello ") == TextValue("hello")
    with pytest.raises(InvalidFieldValue):
        coerce_field_value(definition(FieldType.TEXT), 12)

    select_field = definition(FieldType.SELECT, options=["A", "B"])
    assert coerce_field_value(select_field, "B").json == "B"
    with pytest.raises(InvalidFieldValue):
        coerce_field_value(select_field, "C")


def test_text_longer_than_stored_column_is_rejected():
    text_field = definition(FieldType.TEXT, label="Notes")

    assert coerce_field_value(text_field, "x" * 2000).text == "x" * 2000
    with pytest.raises(InvalidFieldValue) as excinfo:
        coerce_field_value(text_field, "x" * 2001)
    assert "Notes" in excinfo.value.message

    long_option = "y" * 2001
    select_field = definition(FieldType.SELECT, options=[long_option])
    with pytest.raises(InvalidFieldValue):
        coerce_field_value(select_field, long_option)
