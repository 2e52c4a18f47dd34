import json
import sys
from typing import Any, Optional, TextIO

from basis_export.errors import ExportError, InvalidPayload, UnexpectedStatus
from basis_export.models import ExportOptions
from basis_export.providers.basis import BasisClient, DateLike


def render_json(data: Any, pretty: bool = False) -> str:
    """Serialize a payload compactly, or with two-space indentation when `pretty`."""
    if pretty:
        return json.dumps(data, indent=2, ensure_ascii=False)
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def describe_error(exc: ExportError) -> str:
    lines = [f"{exc.__class__.__name__}: {exc}"]
    if exc.url:
        lines.append(f"url: {exc.url}")
    if isinstance(exc, (UnexpectedStatus, InvalidPayload)) and exc.body:
        lines.append(exc.body)
    return "\n".join(lines)


def export_basis_data(username: str, target: Optional[DateLike] = None, client: Optional[BasisClient] = None) -> Any:
    """Fetch one day of Basis data for `username` and return the parsed JSON.

    Raises ExportError on transport failure or a non-200 response.
    """
    client = client or BasisClient()
    return client.export(username, target)


class BasisExportService:
    def __init__(self, client: BasisClient, logger, stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None):
        self.client = client
        self.logger = logger
        self.stdout = stdout
        self.stderr = stderr

    def run(self, options: ExportOptions) -> int:
        stdout = self.stdout or sys.stdout
        stderr = self.stderr or sys.stderr
        try:
            data = self.client.export(options.username, options.date)
        except ExportError as exc:
            self.logger.error(f"Export failed for username={options.username}: {exc}")
            print(describe_error(exc), file=stderr)
            return 1

        print(render_json(data, pretty=options.pretty), file=stdout)
        return 0
