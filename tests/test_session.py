from __future__ import annotations

from metric_timeline.config import AppConfig
from metric_timeline.pipeline.recompute import EMPTY_RESULT
from metric_timeline.pipeline.session import Feedback, TimelineSession

DATA = "METRICID,TIMESTAMP\nA,2024-01-01T00:00:00Z\nB,2024-01-01T00:01:00Z\n"
OTHER_DATA = "METRICID,TIMESTAMP\nC,2024-01-02T00:00:00Z\n"


def _session() -> TimelineSession:
    config = AppConfig.model_validate(
        {
            "categories": [
                {"name": "expected", "display_name": "Expected", "members": "A,C", "color": "#00f"},
                {"name": "actual", "display_name": "Actual", "members": "B", "color": "#f00"},
            ]
        }
    )
    return TimelineSession.from_config(config)


def test_session_without_upload_has_empty_result() -> None:
    assert _session().result is EMPTY_RESULT


def test_upload_success_sends_acknowledgement() -> None:
    session = _session()

    feedback = session.upload(DATA)

    assert feedback == Feedback.success()
    assert feedback.title == "CSV Uploaded"
    assert [entry.label for entry in session.result.timeline] == ["Expected: A", "Actual: B"]


def test_failed_upload_keeps_previous_data() -> None:
    session = _session()
    session.upload(DATA)
    before = session.result

    feedback = session.upload("foo,bar\n1,2\n")

    assert not feedback.ok
    assert feedback.title == "Error"
    assert "METRICID" in feedback.message
    assert session.raw_text == DATA
    assert session.result == before


def test_selection_survives_recompute_with_same_identifiers() -> None:
    session = _session()
    session.upload(DATA)
    session.toggle_select("A")

    session.set_color("expected", "#123456")

    assert session.selection.is_selected("A")
    assert session.result.timeline[0].color == "#123456"


def test_selection_resets_when_identifiers_change() -> None:
    session = _session()
    session.upload(DATA)
    session.toggle_select("A")
    session.set_hover("B")

    session.upload(OTHER_DATA)

    assert session.selection.selected == set()
    assert session.selection.hovered is None


def test_member_changes_reclassify_and_reset_selection() -> None:
    session = _session()
    session.upload(DATA)
    session.toggle_select("A")

    session.set_members("actual", "")

    assert [entry.identifier for entry in session.result.timeline] == ["A"]
    assert not session.selection.is_selected("A")
    assert session.emphasis_for("A").bold is False
