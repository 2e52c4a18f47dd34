import io
import json
import logging
from datetime import date

from basis_export.errors import UnexpectedStatus
from basis_export.models import ExportOptions
from basis_export.providers.basis import BasisClient
from basis_export.services.export_service import BasisExportService, describe_error, export_basis_data, render_json
from conftest import FakeResponse, FakeSession

USERNAME = "aaaaaaaaaaaaaaaaaaaaaaaa"


def test_render_json_compact_has_no_extra_whitespace():
    assert render_json({"a": 1, "b": [1, 2], "c": {"d": "e"}}) == '{"a":1,"b":[1,2],"c":{"d":"e"}}'


def test_render_json_pretty_uses_two_space_indent():
    data = {"a": 1, "b": [1, 2]}

    pretty = render_json(data, pretty=True)

    assert pretty == '{\n  "a": 1,\n  "b": [\n    1,\n    2\n  ]\n}'
    assert json.loads(pretty) == json.loads(render_json(data))


def test_render_json_preserves_key_order_and_unicode():
    assert render_json({"z": 1, "a": "café"}) == '{"z":1,"a":"café"}'


def test_describe_error_includes_response_body():
    exc = UnexpectedStatus(500, "upstream exploded", url="https://example.test/x.json")

    text = describe_error(exc)

    assert "HTTP 500" in text
    assert "https://example.test/x.json" in text
    assert "upstream exploded" in text


def test_export_basis_data_returns_payload():
    session = FakeSession(response=FakeResponse(200, {"a": 1}))

    data = export_basis_data(USERNAME, date(2015, 3, 1), client=BasisClient(session_factory=lambda: session))

    assert data == {"a": 1}
    assert session.calls[0]["params"]["end_date"] == "2015-03-02"


def test_service_run_writes_failure_to_stderr_only():
    session = FakeSession(response=FakeResponse(503, text="busy"))
    stdout, stderr = io.StringIO(), io.StringIO()
    service = BasisExportService(
        BasisClient(session_factory=lambda: session),
        logging.getLogger("basis_export.test"),
        stdout=stdout,
        stderr=stderr,
    )

    assert service.run(ExportOptions(username=USERNAME)) == 1
    assert stdout.getvalue() == ""
    assert "HTTP 503" in stderr.getvalue()
    assert "busy" in stderr.getvalue()


def test_service_run_prints_pretty_payload():
    session = FakeSession(response=FakeResponse(200, {"a": 1}))
    stdout = io.StringIO()
    service = BasisExportService(
        BasisClient(session_factory=lambda: session),
        logging.getLogger("basis_export.test"),
        stdout=stdout,
        stderr=io.StringIO(),
    )

    assert service.run(ExportOptions(username=USERNAME, pretty=True)) == 0
    assert stdout.getvalue() == '{\n  "a": 1\n}\n'
