"""
Engine facade consumed by the two editing surfaces.

Binds one template to the reconciliation components and exposes the
operations the surfaces need: index, render model, widget inputs,
update patches, unfilled tracking and navigation. It is also the
composition root for a synchronized editing session.

Components below this facade never log degraded resolution themselves.
The facade is their caller and reports it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from reconciler.app.config import ReconcilerConfig
from reconciler.app.events import SyncEventEmitter
from reconciler.app.reconciliation.dates import to_html_date_value
from reconciler.app.reconciliation.families import FamilyGrouper
from reconciler.app.reconciliation.indexer import SchemaIndexer
from reconciler.app.reconciliation.navigator import FieldNavigator
from reconciler.app.reconciliation.radio_codec import (
    RadioGroupResolver,
    to_widget_value,
)
from reconciler.app.reconciliation.unfilled import UnfilledFieldTracker
from reconciler.app.reconciliation.update_engine import FieldUpdateEngine, Patch
from reconciler.app.schemas.fields import (
    ContractData,
    SchemaIndex,
    UnfilledFieldsResult,
)
from reconciler.app.schemas.render import RenderModel
from reconciler.app.schemas.template import FieldType, TemplateSchema
from reconciler.app.sync import (
    ContractSyncCoordinator,
    EditingSurface,
    WidgetSink,
)
from reconciler.app.sync.surface import Deferrer
from reconciler.app.utils.logging_setup import configure_logging

logger = logging.getLogger(__name__)


class ContractFieldEngine:
    """
    Reconciliation engine for one template.

    The template is indexed once at construction. Contract data is never
    held here; every operation takes the current record explicitly.
    """

    def __init__(
        self,
        template: Any,
        config: Optional[ReconcilerConfig] = None,
    ) -> None:
        self._config = config or ReconcilerConfig()
        self._template = TemplateSchema.from_raw(template)
        self._index = SchemaIndexer(self._config).index(self._template)

        self._resolver = RadioGroupResolver(self._index, self._config)
        self._grouper = FamilyGrouper(self._resolver, self._config)
        self._updater = FieldUpdateEngine(self._index)
        self._tracker = UnfilledFieldTracker(self._config)

        logger.debug(
            "Indexed template: %d field(s), %d option group(s), %d page(s)",
            len(self._index.fields),
            len(self._index.groups),
            self._index.page_count,
        )

    @classmethod
    def from_env(cls, template: Any) -> "ContractFieldEngine":
        """
        Build an engine for a process configured through ``RECONCILER_*``
        environment variables. Applies ``LOG_LEVEL`` to the package
        loggers before indexing.
        """
        config = ReconcilerConfig.from_env()
        configure_logging(config)
        return cls(template, config)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> ReconcilerConfig:
        return self._config

    @property
    def template(self) -> TemplateSchema:
        return self._template

    @property
    def resolver(self) -> RadioGroupResolver:
        return self._resolver

    @property
    def updater(self) -> FieldUpdateEngine:
        return self._updater

    def index(self) -> SchemaIndex:
        return self._index

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def render_model(
        self,
        contract_data: Optional[ContractData],
        page: int = 1,
    ) -> RenderModel:
        model = self._grouper.group(self._index, contract_data, page)

        for field_name in model.unresolved_other_fields:
            logger.warning(
                "No option group found for other-description field %r; "
                "field will not be shown",
                field_name,
            )

        return model

    def to_widget_inputs(self, contract_data: Optional[ContractData]) -> Dict[str, str]:
        return self._resolver.to_widget_inputs(contract_data)

    def to_widget_pages(
        self,
        contract_data: Optional[ContractData],
    ) -> List[Dict[str, str]]:
        return self._resolver.to_widget_pages(contract_data)

    def to_form_values(self, contract_data: Optional[ContractData]) -> Dict[str, str]:
        """
        Values for the structured form surface.

        Group keys carry the stored selection, date fields are
        normalized for date inputs, checkboxes read "true" or "".
        """
        data = contract_data or {}
        values: Dict[str, str] = {}

        for group_key in self._index.groups:
            values[group_key] = self._resolver.selected_option(group_key, data) or ""

        for field in self._index.fields:
            if field.is_option:
                continue

            raw = data.get(field.name)
            if field.type == FieldType.CHECKBOX:
                values[field.name] = (
                    "true" if raw is True or raw == "true" else ""
                )
            elif field.type == FieldType.DATE:
                values[field.name] = to_html_date_value(raw, self._config)
            elif raw is not None:
                values[field.name] = to_widget_value(raw)

        return values

    def unfilled(self, contract_data: Optional[ContractData]) -> UnfilledFieldsResult:
        return self._tracker.compute(self._index, contract_data)

    def unfilled_from_required_keys(
        self,
        required_keys: Iterable[str],
        values: Optional[ContractData],
    ) -> UnfilledFieldsResult:
        return self._tracker.compute_from_required_keys(required_keys, values)

    def navigator(self, contract_data: Optional[ContractData]) -> FieldNavigator:
        return FieldNavigator(self.unfilled(contract_data).unfilled_fields)

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def update(
        self,
        field_name: str,
        value: Any,
        current: Optional[ContractData] = None,
    ) -> Patch:
        return self._updater.compute_update(field_name, value, current)

    def update_many(
        self,
        updates: Mapping[str, Any],
        current: Optional[ContractData] = None,
    ) -> Patch:
        return self._updater.compute_updates(updates, current)

    # ------------------------------------------------------------------
    # Synchronized editing session (composition root)
    # ------------------------------------------------------------------

    def open_session(
        self,
        contract_data: Optional[ContractData] = None,
        *,
        emitter: Optional[SyncEventEmitter] = None,
    ) -> ContractSyncCoordinator:
        return ContractSyncCoordinator(contract_data, emitter=emitter)

    def canvas_surface(
        self,
        session: ContractSyncCoordinator,
        sink: WidgetSink,
        *,
        surface_id: str = "canvas",
        defer: Optional[Deferrer] = None,
        emitter: Optional[SyncEventEmitter] = None,
    ) -> EditingSurface:
        """
        Attach the visual canvas surface. Its widgets take per-option
        surface form, and option selections are announced on the
        session's group channel so sibling widgets redraw.
        """
        surface = EditingSurface(
            surface_id,
            updater=self._updater,
            project=self.to_widget_inputs,
            sink=sink,
            defer=defer,
            channel=session.channel,
            emitter=emitter,
        )
        session.attach(surface)
        return surface

    def form_surface(
        self,
        session: ContractSyncCoordinator,
        sink: WidgetSink,
        *,
        surface_id: str = "form",
        defer: Optional[Deferrer] = None,
        emitter: Optional[SyncEventEmitter] = None,
    ) -> EditingSurface:
        """Attach the structured form surface."""
        surface = EditingSurface(
            surface_id,
            updater=self._updater,
            project=self.to_form_values,
            sink=sink,
            defer=defer,
            emitter=emitter,
        )
        session.attach(surface)
        return surface
