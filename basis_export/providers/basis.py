import json
from datetime import date, datetime, timedelta, timezone
from time import perf_counter
from typing import Any, Callable, Optional, Union

import requests

from basis_export.errors import InvalidPayload, TransportError, UnexpectedStatus
from basis_export.models import ChartRequest, DateRange

BASIS_API_URL = "https://app.mybasis.com/api/v1/chart/"
INTERVAL = 60
OFFSET = 0
DEFAULT_TIMEOUT = 15.0

ONE_DAY = timedelta(days=1)

DateLike = Union[date, datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_date_as_string(value: DateLike) -> str:
    """Format a date or datetime as YYYY-MM-DD in UTC.

    Naive datetimes are taken to already be UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()
    return value.isoformat()


def get_date_range(target: Optional[DateLike] = None, now: Optional[datetime] = None) -> DateRange:
    """Return the one-day window starting at `target`.

    Defaults to yesterday, evaluated against the clock at call time unless
    `now` is given.
    """
    if target is None:
        target = (now or _utcnow()) - ONE_DAY
    try:
        end = target + ONE_DAY
    except OverflowError as exc:
        raise ValueError(f"No day follows {target!r}") from exc
    return DateRange(
        start_date=format_date_as_string(target),
        end_date=format_date_as_string(end),
    )


def build_request(username: str, target: Optional[DateLike] = None, base_url: str = BASIS_API_URL, now: Optional[datetime] = None) -> ChartRequest:
    date_range = get_date_range(target, now=now)
    return ChartRequest(
        url=f"{base_url}{username}.json",
        params={
            "summary": "true",
            "interval": INTERVAL,
            "start_date": date_range.start_date,
            "start_offset": OFFSET,
            "end_date": date_range.end_date,
            "end_offset": OFFSET,
            "units": "ms",
            "heartrate": "true",
            "steps": "true",
            "calories": "true",
            "gsr": "true",
            "skin_temp": "true",
            "bodystates": "true",
        },
    )


class BasisClient:
    """Fetches chart data for one user from the Basis web API."""

    def __init__(
        self,
        base_url: str = BASIS_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        logger=None,
        session_factory: Optional[Callable[[], Any]] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.logger = logger
        self.session_factory = session_factory

    def _session(self):
        factory = self.session_factory or requests.Session
        return factory()

    def _log(self, level: str, message: str) -> None:
        if self.logger is not None:
            getattr(self.logger, level)(message)

    def build_request(self, username: str, target: Optional[DateLike] = None) -> ChartRequest:
        return build_request(username, target, base_url=self.base_url)

    def fetch_chart(self, chart_request: ChartRequest) -> Any:
        """Perform the GET and return the decoded JSON body.

        Raises TransportError, UnexpectedStatus or InvalidPayload.
        """
        url = chart_request.url
        started = perf_counter()
        try:
            with self._session() as session:
                resp = session.get(url, params=dict(chart_request.params), timeout=self.timeout)
        except requests.RequestException as exc:
            elapsed_ms = (perf_counter() - started) * 1000
            self._log(
                "error",
                f"[timing] operation=basis.chart duration_ms={elapsed_ms:.2f} status=error error={exc.__class__.__name__}",
            )
            raise TransportError(f"Request to {url} failed: {exc}", url=url) from exc

        elapsed_ms = (perf_counter() - started) * 1000
        if resp.status_code != 200:
            self._log(
                "error",
                f"[timing] operation=basis.chart duration_ms={elapsed_ms:.2f} status=error http_status={resp.status_code}",
            )
            raise UnexpectedStatus(resp.status_code, resp.text, url=url)

        self._log("info", f"[timing] operation=basis.chart duration_ms={elapsed_ms:.2f} status=ok")
        try:
            return resp.json()
        except ValueError as exc:
            raise InvalidPayload(f"Response from {url} is not valid JSON", resp.text, url=url) from exc

    def export(self, username: str, target: Optional[DateLike] = None) -> Any:
        chart_request = self.build_request(username, target)
        self._log("info", f"Fetching Basis chart for username={username} params={json.dumps(chart_request.params)}")
        return self.fetch_chart(chart_request)
