"""
Contract field reconciliation.

Reconciles a flat, loosely typed template field schema with a flat
contract data record: schema indexing, family grouping, option-group
encoding, patch computation and required-field tracking. Everything in
this package is synchronous and free of side effects.
"""

from .indexer import SchemaIndexer
from .families import (
    FamilyGrouper,
    build_description_map,
    find_other_description_group,
    get_field_family,
)
from .labels import format_field_label, format_family_label, format_option_label
from .radio_codec import RadioGroupResolver, to_widget_value
from .update_engine import FieldUpdateEngine, merge_patch
from .unfilled import UnfilledFieldTracker, is_field_empty
from .navigator import FieldNavigator, NavigatorState
from .dates import to_html_date_value

__all__ = [
    "SchemaIndexer",
    "FamilyGrouper",
    "build_description_map",
    "find_other_description_group",
    "get_field_family",
    "format_field_label",
    "format_family_label",
    "format_option_label",
    "RadioGroupResolver",
    "to_widget_value",
    "FieldUpdateEngine",
    "merge_patch",
    "UnfilledFieldTracker",
    "is_field_empty",
    "FieldNavigator",
    "NavigatorState",
    "to_html_date_value",
]
