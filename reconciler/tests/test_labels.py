import pytest

from reconciler.app.reconciliation.labels import (
    format_family_label,
    format_field_label,
    format_option_label,
)


def test_field_label_uses_full_last_segment():
    assert format_field_label("purchase.included_addenda_flags") == "Included Addenda Flags"


def test_field_label_expands_camel_case():
    assert format_field_label("purchase.buyerNames_test") == "Buyer Names Test"


def test_field_label_without_dots():
    assert format_field_label("closing_date") == "Closing Date"


@pytest.mark.parametrize(
    "name",
    [
        "purchase.included_addenda_flags",
        "purchase.parties.buyer_names",
        "a.b.c.seller_agent_license_number",
        "contract.effectiveDate",
        "top_level",
    ],
)
def test_multi_word_last_segment_is_never_truncated(name):
    # Regression guard: labels must not collapse to the last underscore token.
    assert len(format_field_label(name).split()) >= 2


def test_family_label():
    assert (
        format_family_label("purchase.property.included_appliances")
        == "Purchase Property Included Appliances"
    )
    assert format_family_label("") == ""


def test_option_label_strips_group_base():
    assert (
        format_option_label(
            "purchase.financing.type_cash", "purchase.financing.type_group"
        )
        == "Cash"
    )
    assert format_option_label("payment.check", "payment_group") == "Check"


def test_option_label_dot_group_suffix():
    assert (
        format_option_label("escrow.holder.title_company", "escrow.holder.group")
        == "Title Company"
    )


def test_option_label_falls_back_to_trailing_segments():
    # Every segment matches the base, so nothing distinguishes the option.
    assert format_option_label("payment.type", "payment.type_group") == "Payment Type"
