from reconciler.app.reconciliation.indexer import SchemaIndexer
from reconciler.app.reconciliation.radio_codec import (
    RadioGroupResolver,
    to_widget_value,
)
from reconciler.tests.fixtures.templates import (
    FINANCING_GROUP,
    purchase_template,
    scenario_template,
)


def _resolver(template):
    return RadioGroupResolver(SchemaIndexer().index(template))


def test_surface_form_selects_only_stored_option():
    resolver = _resolver(scenario_template())
    data = {"payment_group": "payment.cash"}

    assert resolver.to_surface_form("payment_group", "payment.cash", data) == "payment.cash"
    assert resolver.to_surface_form("payment_group", "payment.check", data) == ""
    assert resolver.to_surface_form("payment_group", "payment.cash", {}) == ""
    assert resolver.to_surface_form("payment_group", "payment.cash", None) == ""


def test_never_more_than_one_option_selected():
    resolver = _resolver(purchase_template())

    for stored in [
        None,
        "",
        "purchase.financing.type_cash",
        "purchase.financing.type_check",
        "not-a-member",
        True,
    ]:
        inputs = resolver.to_widget_inputs({FINANCING_GROUP: stored})
        options = [
            inputs[name]
            for name in (
                "purchase.financing.type_cash",
                "purchase.financing.type_other",
                "purchase.financing.type_check",
            )
        ]
        assert sum(1 for v in options if v) <= 1


def test_selected_option_ignores_non_members():
    resolver = _resolver(scenario_template())

    assert resolver.selected_option("payment_group", {"payment_group": "payment.check"}) == "payment.check"
    assert resolver.selected_option("payment_group", {"payment_group": "bogus"}) is None
    assert resolver.selected_option("payment_group", {}) is None


def test_other_selected_is_case_insensitive_substring():
    resolver = _resolver(purchase_template())

    assert resolver.is_other_selected(
        FINANCING_GROUP, {FINANCING_GROUP: "purchase.financing.type_OTHER"}
    )
    assert not resolver.is_other_selected(
        FINANCING_GROUP, {FINANCING_GROUP: "purchase.financing.type_cash"}
    )
    assert not resolver.is_other_selected(FINANCING_GROUP, {})
    # Heuristic, kept as-is.
    assert resolver.is_other_selected(FINANCING_GROUP, {FINANCING_GROUP: "brothers_realty"})


def test_widget_inputs_stringify_and_omit_missing():
    resolver = _resolver(purchase_template())
    inputs = resolver.to_widget_inputs(
        {
            FINANCING_GROUP: "purchase.financing.type_check",
            "purchase.property.included_appliances.refrigerator": True,
            "purchase.parties.buyer_names": "Jane Doe",
            "buyer_signature": "data:image/png;base64,AAAA",
        }
    )

    assert inputs["purchase.financing.type_cash"] == ""
    assert inputs["purchase.financing.type_other"] == ""
    assert inputs["purchase.financing.type_check"] == "purchase.financing.type_check"
    assert inputs["purchase.property.included_appliances.refrigerator"] == "true"
    assert inputs["purchase.parties.buyer_names"] == "Jane Doe"
    assert inputs["buyer_signature"] == "data:image/png;base64,AAAA"
    assert "closing_date" not in inputs
    assert FINANCING_GROUP not in inputs


def test_widget_pages_repeat_inputs_per_page():
    resolver = _resolver(scenario_template())
    pages = resolver.to_widget_pages({"buyer.name": "Jane"})

    assert len(pages) == 2
    assert pages[0] == pages[1]
    assert pages[0]["buyer.name"] == "Jane"


def test_to_widget_value():
    assert to_widget_value(False) == "false"
    assert to_widget_value({"a": 1}) == '{"a": 1}'
    assert to_widget_value(["x"]) == '["x"]'
    assert to_widget_value(3) == "3"
