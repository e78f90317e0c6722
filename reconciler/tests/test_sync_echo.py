import pytest

from reconciler.app.engine import ContractFieldEngine
from reconciler.app.errors import SurfaceStateError
from reconciler.app.events import MemoryQueueEventEmitter, SyncEventType
from reconciler.app.sync import (
    ContractSyncCoordinator,
    EditingSurface,
    GroupSelectionChannel,
    SurfaceState,
)
from reconciler.tests.fixtures.templates import (
    ManualTicks,
    RecordingSink,
    scenario_template,
)


@pytest.fixture
def ticks() -> ManualTicks:
    return ManualTicks()


def _session(ticks, emitter=None, initial=None):
    engine = ContractFieldEngine(scenario_template())
    session = engine.open_session(initial or {}, emitter=emitter)

    canvas_sink = RecordingSink(echo=True)
    form_sink = RecordingSink(echo=True)
    canvas = engine.canvas_surface(session, canvas_sink, defer=ticks, emitter=emitter)
    form = engine.form_surface(session, form_sink, defer=ticks, emitter=emitter)
    canvas_sink.surface = canvas
    form_sink.surface = form
    ticks.run()

    return session, canvas, canvas_sink, form, form_sink


def test_attach_pushes_current_record(ticks):
    session, canvas, canvas_sink, form, form_sink = _session(ticks)

    assert canvas_sink.pushes == [{"payment.cash": "", "payment.check": ""}]
    assert form_sink.pushes == [{"payment_group": ""}]
    assert canvas.state == SurfaceState.IDLE
    assert form.state == SurfaceState.IDLE


def test_form_edit_reaches_canvas_once_without_echo(ticks):
    session, canvas, canvas_sink, form, form_sink = _session(ticks)

    patch = form.handle_local_change("buyer.name", "Jane")

    assert patch == {"buyer.name": "Jane"}
    assert session.merge_count == 1
    assert session.record == {"buyer.name": "Jane"}

    # Canvas received the mirror once and its widget echoes were dropped.
    assert len(canvas_sink.pushes) == 2
    assert canvas_sink.pushes[-1]["buyer.name"] == "Jane"
    assert canvas_sink.echo_results and all(r is None for r in canvas_sink.echo_results)

    # The origin surface did not get its own edit pushed back.
    assert len(form_sink.pushes) == 1


def test_canvas_option_edit_is_mirrored_to_form(ticks):
    session, canvas, canvas_sink, form, form_sink = _session(ticks)

    canvas.handle_local_change("payment.cash", "true")

    assert session.record == {"payment_group": "payment.cash"}
    assert session.merge_count == 1
    assert form_sink.pushes[-1]["payment_group"] == "payment.cash"
    assert len(canvas_sink.pushes) == 1


def test_state_returns_to_idle_only_after_tick(ticks):
    session, canvas, canvas_sink, form, form_sink = _session(ticks)

    form.handle_local_change("buyer.name", "J")
    assert form.state == SurfaceState.EMITTING_LOCAL
    assert canvas.state == SurfaceState.APPLYING_EXTERNAL

    ticks.run()
    assert form.state == SurfaceState.IDLE
    assert canvas.state == SurfaceState.IDLE


def test_keystrokes_within_one_tick(ticks):
    session, canvas, canvas_sink, form, form_sink = _session(ticks)

    form.handle_local_change("buyer.name", "J")
    form.handle_local_change("buyer.name", "Ja")

    # The first deferred reset is stale and must not end the phase.
    first, *_ = ticks.pending
    first()
    assert form.state == SurfaceState.EMITTING_LOCAL

    ticks.run()
    assert form.state == SurfaceState.IDLE
    assert session.record == {"buyer.name": "Ja"}
    assert session.merge_count == 2


def test_edit_while_applying_external_is_ignored(ticks):
    session, canvas, canvas_sink, form, form_sink = _session(ticks)

    form.handle_local_change("buyer.name", "Jane")
    assert canvas.handle_local_change("buyer.name", "Jane") is None
    assert session.merge_count == 1


def test_empty_patch_is_not_mirrored(ticks):
    session, canvas, canvas_sink, form, form_sink = _session(ticks)

    assert form.handle_local_change("payment_group", "payment.wire") == {}
    assert session.merge_count == 0
    assert len(canvas_sink.pushes) == 1


def test_events_record_protocol(ticks):
    emitter = MemoryQueueEventEmitter()
    session, canvas, canvas_sink, form, form_sink = _session(ticks, emitter)

    form.handle_local_change("buyer.name", "Jane")

    assert len(emitter.of_type(SyncEventType.SURFACE_ATTACHED)) == 2
    assert len(emitter.of_type(SyncEventType.PATCH_EMITTED)) == 1
    assert len(emitter.of_type(SyncEventType.PATCH_MERGED)) == 1
    suppressed = emitter.of_type(SyncEventType.ECHO_SUPPRESSED)
    assert {e.surface_id for e in suppressed} == {"canvas", "form"}
    assert all(e.session_id == session.session_id for e in emitter.events)


def test_detached_surface_cannot_edit(ticks):
    engine = ContractFieldEngine(scenario_template())
    surface = EditingSurface(
        "orphan",
        updater=engine.updater,
        project=engine.to_widget_inputs,
        sink=RecordingSink(),
        defer=ticks,
    )

    with pytest.raises(SurfaceStateError):
        surface.handle_local_change("buyer.name", "Jane")


def test_detach(ticks):
    session, canvas, canvas_sink, form, form_sink = _session(ticks)
    session.channel.subscribe("payment_group", lambda key, option: None)

    session.detach("form")
    assert not form.is_attached
    assert [s.surface_id for s in session.surfaces] == ["canvas"]

    canvas.handle_local_change("buyer.name", "Jane")
    assert len(form_sink.pushes) == 1

    session.detach("canvas")
    session.detach("canvas")
    assert session.channel.subscriber_count("payment_group") == 0
    assert session.record == {"buyer.name": "Jane"}


def test_load_replaces_record(ticks):
    session, canvas, canvas_sink, form, form_sink = _session(ticks)

    session.load({"payment_group": "payment.check"})

    assert session.record == {"payment_group": "payment.check"}
    assert session.merge_count == 0
    assert canvas_sink.pushes[-1]["payment.check"] == "payment.check"
    assert form_sink.pushes[-1]["payment_group"] == "payment.check"


def test_option_selection_is_published_to_group_only(ticks):
    session, canvas, canvas_sink, form, form_sink = _session(ticks)
    received = []
    session.channel.subscribe("payment_group", lambda key, option: received.append((key, option)))
    session.channel.subscribe("other_group", lambda key, option: received.append((key, option)))

    canvas.handle_local_change("payment.check", "true")
    ticks.run()
    canvas.handle_local_change("buyer.name", "Jane")

    assert received == [("payment_group", "payment.check")]


def test_channels_do_not_cross_sessions():
    first = GroupSelectionChannel()
    second = GroupSelectionChannel()
    received = []
    first.subscribe("payment_group", lambda key, option: received.append(option))

    assert second.publish("payment_group", "payment.cash") == 0
    assert received == []

    unsubscribe = second.subscribe("payment_group", lambda key, option: received.append(option))
    assert second.publish("payment_group", "payment.cash") == 1
    unsubscribe()
    assert second.subscriber_count("payment_group") == 0
    assert received == ["payment.cash"]


def test_coordinator_without_surfaces():
    session = ContractSyncCoordinator({"a": "1"}, session_id="s-1")

    assert session.submit("api", {"b": "2"}) == {"a": "1", "b": "2"}
    assert session.submit("api", {}) == {"a": "1", "b": "2"}
    assert session.merge_count == 1
    assert session.session_id == "s-1"


def test_sibling_clear_after_selection_does_not_merge_again(ticks):
    session, canvas, canvas_sink, form, form_sink = _session(
        ticks, initial={"payment_group": "payment.check"}
    )
    members = ["payment.cash", "payment.check"]

    def clear_siblings(group_key, selected):
        # Option widgets reset themselves when a sibling is selected.
        for name in members:
            if name != selected:
                canvas.handle_local_change(name, "")

    session.channel.subscribe("payment_group", clear_siblings)

    canvas.handle_local_change("payment.cash", "true")
    ticks.run()
    ticks.run()

    assert session.merge_count == 1
    assert session.record == {"payment_group": "payment.cash"}
    assert [p["payment_group"] for p in form_sink.pushes] == [
        "payment.check",
        "payment.cash",
    ]


def test_emitter_rejects_non_positive_bound():
    with pytest.raises(ValueError):
        MemoryQueueEventEmitter(max_events=0)
