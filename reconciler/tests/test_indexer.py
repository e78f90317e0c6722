import pytest

from reconciler.app.config import ReconcilerConfig
from reconciler.app.reconciliation.indexer import SchemaIndexer
from reconciler.app.schemas.template import FieldType, TemplateSchema
from reconciler.tests.fixtures.templates import (
    FINANCING_GROUP,
    purchase_template,
)


@pytest.mark.parametrize(
    "template",
    [None, {}, {"schemas": None}, {"schemas": []}, "not a template"],
)
def test_missing_schema_yields_empty_index(template):
    index = SchemaIndexer().index(template)

    assert index.fields == []
    assert index.groups == {}
    assert index.page_count == 0


def test_order_and_pages_are_preserved():
    index = SchemaIndexer().index(purchase_template())

    assert [f.name for f in index.fields] == [
        "purchase.parties.buyer_names",
        "purchase.property.included_appliances.refrigerator",
        "purchase.property.included_appliances.refrigerator_description",
        "purchase.financing.type_cash",
        "purchase.financing.type_other",
        "purchase.financing.type_other_description",
        "closing_date",
        "purchase.financing.type_check",
        "purchase.notes.other_terms_description",
    ]
    assert index.page_count == 2
    assert index.get("purchase.financing.type_check").page == 2
    assert index.get("closing_date").position_y == 5


def test_signature_fields_are_dropped():
    index = SchemaIndexer().index(purchase_template())

    assert index.get("buyer_signature") is None
    assert index.presentation_fields == ["buyer_signature"]


def test_groups_merge_across_pages():
    index = SchemaIndexer().index(purchase_template())

    members = index.groups[FINANCING_GROUP]
    assert [m.name for m in members] == [
        "purchase.financing.type_cash",
        "purchase.financing.type_other",
        "purchase.financing.type_check",
    ]
    assert [m.page for m in members] == [1, 1, 2]
    # Legacy "radioGroup" tag is read as an option.
    assert members[-1].type == FieldType.RADIO_GROUP_OPTION


def test_name_keyed_page_uses_key_as_name():
    index = SchemaIndexer().index(
        {"schemas": [{"buyer.email": {"type": "text"}}]}
    )
    assert [f.name for f in index.fields] == ["buyer.email"]


def test_malformed_entries_are_skipped():
    template = {
        "schemas": [
            [
                {"type": "text"},
                "junk",
                {"name": "", "type": "text"},
                {"name": "buyer.name", "type": "text"},
                {"name": "buyer.name", "type": "checkbox"},
            ],
            "not a page",
        ]
    }
    index = SchemaIndexer().index(template)

    assert [f.name for f in index.fields] == ["buyer.name"]
    assert index.get("buyer.name").type == FieldType.TEXT
    assert index.page_count == 2


def test_option_without_group_is_not_grouped():
    index = SchemaIndexer().index(
        {"schemas": [[{"name": "lonely", "type": "radioGroupOption", "group": " "}]]}
    )
    assert index.groups == {}
    assert index.get("lonely").is_option is False


def test_required_flag_is_parsed_loosely():
    template = {
        "schemas": [
            [
                {"name": "a", "required": True},
                {"name": "b", "required": "TRUE"},
                {"name": "c", "required": 1},
                {"name": "d", "required": "1"},
                {"name": "e", "required": False},
                {"name": "f", "required": "no"},
                {"name": "g"},
            ]
        ]
    }
    index = SchemaIndexer().index(template)

    assert [f.name for f in index.fields if f.required] == ["a", "b", "c", "d"]


def test_configured_presentation_types_are_dropped():
    config = ReconcilerConfig(PRESENTATION_ONLY_TYPES=("signature", "Image"))
    template = {
        "schemas": [
            [
                {"name": "logo", "type": "image"},
                {"name": "buyer.name", "type": "text"},
            ]
        ]
    }
    index = SchemaIndexer(config).index(template)

    assert [f.name for f in index.fields] == ["buyer.name"]
    assert index.presentation_fields == ["logo"]


def test_accepts_parsed_template():
    schema = TemplateSchema.from_raw(purchase_template())
    assert SchemaIndexer().index(schema).page_count == 2


def test_fields_by_page():
    index = SchemaIndexer().index(purchase_template())
    pages = index.fields_by_page()

    assert sorted(pages) == [1, 2]
    assert [f.name for f in pages[2]] == [
        "purchase.financing.type_check",
        "purchase.notes.other_terms_description",
    ]
    assert index.fields_on_page(3) == []


def test_badly_typed_attributes_do_not_drop_the_field():
    template = {
        "schemas": [
            [
                {
                    "name": "buyer.deposit",
                    "type": "text",
                    "required": True,
                    "description": 500,
                    "content": {"font": "Helvetica"},
                    "options": 3,
                    "position": {"x": "12.5", "y": "top"},
                },
                {"name": 42, "type": "text", "position": "oops"},
                {"name": "buyer.name", "group": 7, "position": {"y": "nan"}},
            ]
        ]
    }
    index = SchemaIndexer().index(template)

    assert [f.name for f in index.fields] == ["buyer.deposit", "42", "buyer.name"]

    deposit = index.get("buyer.deposit")
    assert deposit.required is True
    assert deposit.description == "500"
    assert deposit.content is None
    assert deposit.options is None
    assert deposit.position_y is None

    assert index.get("42").position_y is None
    assert index.get("buyer.name").group == "7"
    assert index.get("buyer.name").position_y is None
