"""
Template builders and sync test doubles shared across reconciler tests.
"""

from typing import Callable, Dict, List, Optional


def scenario_template() -> dict:
    """
    Two pages: a required buyer name, then a required payment choice.
    """
    return {
        "basePdf": "BLANK_PDF",
        "schemas": [
            [
                {"name": "buyer.name", "type": "text", "required": True},
            ],
            [
                {
                    "name": "payment.cash",
                    "type": "radioGroupOption",
                    "group": "payment_group",
                    "required": True,
                },
                {
                    "name": "payment.check",
                    "type": "radioGroupOption",
                    "group": "payment_group",
                    "required": True,
                },
            ],
        ],
    }


def purchase_template() -> dict:
    """
    A purchase agreement fragment exercising every render item kind.

    Page 1 is an array page, page 2 a name-keyed page. The financing
    option group spans both pages.
    """
    return {
        "basePdf": {"width": 210, "height": 297},
        "schemas": [
            [
                {
                    "name": "purchase.parties.buyer_names",
                    "type": "text",
                    "required": True,
                    "position": {"x": 10, "y": 10},
                },
                {
                    "name": "purchase.property.included_appliances.refrigerator",
                    "type": "checkbox",
                    "position": {"x": 10, "y": 50},
                },
                {
                    "name": "purchase.property.included_appliances.refrigerator_description",
                    "type": "text",
                    "position": {"x": 30, "y": 52},
                },
                {
                    "name": "purchase.financing.type_cash",
                    "type": "radioGroupOption",
                    "group": "purchase.financing.type_group",
                    "groupDescription": "Financing Type",
                    "required": "true",
                    "position": {"x": 10, "y": 80},
                },
                {
                    "name": "purchase.financing.type_other",
                    "type": "radioGroupOption",
                    "group": "purchase.financing.type_group",
                    "required": "true",
                    "position": {"x": 10, "y": 82},
                },
                {
                    "name": "purchase.financing.type_other_description",
                    "type": "text",
                    "position": {"x": 30, "y": 84},
                },
                {
                    "name": "buyer_signature",
                    "type": "signature",
                    "required": True,
                    "position": {"x": 10, "y": 250},
                },
                {
                    "name": "closing_date",
                    "type": "date",
                    "required": True,
                    "position": {"x": 10, "y": 5},
                },
            ],
            {
                "purchase.financing.type_check": {
                    "type": "radioGroup",
                    "group": "purchase.financing.type_group",
                    "required": True,
                    "position": {"x": 10, "y": 20},
                },
                "purchase.notes.other_terms_description": {
                    "type": "text",
                    "position": {"x": 10, "y": 40},
                },
            },
        ],
    }


FINANCING_GROUP = "purchase.financing.type_group"


# ---------------------------------------------------------------------------
# Sync doubles
# ---------------------------------------------------------------------------


class ManualTicks:
    """
    Deferrer that queues callbacks until the test advances the tick.
    """

    def __init__(self) -> None:
        self.pending: List[Callable[[], None]] = []

    def __call__(self, callback: Callable[[], None]) -> None:
        self.pending.append(callback)

    def run(self) -> int:
        callbacks, self.pending = self.pending, []
        for callback in callbacks:
            callback()
        return len(callbacks)


class RecordingSink:
    """
    Widget sink that records pushes.

    When ``echo`` is set the sink behaves like a real widget toolkit and
    fires a change event for every value written into it.
    """

    def __init__(self, echo: bool = False) -> None:
        self.pushes: List[Dict[str, str]] = []
        self.echo = echo
        self.surface = None
        self.echo_results: List[Optional[dict]] = []

    def set_inputs(self, values: Dict[str, str]) -> None:
        self.pushes.append(dict(values))
        if self.echo and self.surface is not None:
            for name, value in values.items():
                self.echo_results.append(
                    self.surface.handle_local_change(name, value)
                )
