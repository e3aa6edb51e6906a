"""
Remote timesheet operations.

Defines the interface the review core needs from the timesheet backend and
a ``requests`` implementation of it against the REST API.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol

import requests
from pydantic import ValidationError

from timesheet_review.models.review import TeamReviewFilter, TeamScope
from timesheet_review.models.timesheet import TimeEntry, Timesheet
from timesheet_review.services.response_cache import ResponseCache
from timesheet_review.services.retry_handler import RetryHandler

logger = logging.getLogger(__name__)


class RemoteTimesheetOperations(Protocol):
    """Operations the review core consumes from the timesheet backend.

    Write operations raise on failure; any exception is treated as a remote
    failure by the caller.
    """

    def submit_timesheet(self, timesheet_id: str) -> None: ...

    def approve_timesheet(self, timesheet_id: str, reviewer_id: str) -> None: ...

    def reject_timesheet(self, timesheet_id: str, reviewer_id: str, reason: str) -> None: ...

    def reopen_timesheet(self, timesheet_id: str) -> None: ...

    def fetch_timesheets(self, scope_filter: Optional[TeamReviewFilter] = None) -> List[Timesheet]: ...

    def fetch_team_scope(self, actor_id: str) -> TeamScope: ...


def parse_timesheet(payload: Mapping[str, Any]) -> Timesheet:
    """Build a Timesheet from an API payload.

    Accepts the backend's field names (``_id``, ``user_id``) next to the
    model's own.

    Raises:
        pydantic.ValidationError: If the payload is not a valid timesheet
    """
    data = dict(payload)
    if "id" not in data and "_id" in data:
        data["id"] = data.pop("_id")
    if "owner_user_id" not in data and "user_id" in data:
        data["owner_user_id"] = data.pop("user_id")
    entry_fields = set(TimeEntry.model_fields)
    data["entries"] = [
        {k: v for k, v in entry.items() if k in entry_fields}
        for entry in data.get("entries") or []
    ]
    known = set(Timesheet.model_fields)
    return Timesheet.model_validate({k: v for k, v in data.items() if k in known})


class TimesheetApiClient:
    """
    REST client for the timesheet backend.

    Features:
    - Bearer token authentication on a shared ``requests.Session``
    - Reads retried with backoff and served from an explicit ResponseCache
    - Writes sent exactly once; a successful write invalidates cached reads

    Example:
        >>> client = TimesheetApiClient("https://api.example.com/api/v1", token="...")
        >>> client.approve_timesheet("ts-1", reviewer_id="u-7")
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        retry_handler: Optional[RetryHandler] = None,
        cache: Optional[ResponseCache] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: API root, e.g. ``https://host/api/v1``
            token: Bearer token for the current session
            timeout: Per-request timeout in seconds
            session: Custom requests session (mainly for tests)
            retry_handler: Retry handler for reads
            cache: Response cache for reads; None disables caching
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_handler = retry_handler or RetryHandler()
        self.cache = cache

        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        def _read_operation():
            response = self._session.get(self._url(path), params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()

        return self.retry_handler.execute_with_retry(_read_operation)

    def _post(self, path: str, payload: Optional[Dict[str, Any]] = None) -> None:
        response = self._session.post(self._url(path), json=payload or {}, timeout=self.timeout)
        response.raise_for_status()
        if self.cache is not None:
            self.cache.invalidate_prefix("timesheets")

    def submit_timesheet(self, timesheet_id: str) -> None:
        logger.info(f"Submitting timesheet {timesheet_id}")
        self._post(f"timesheets/{timesheet_id}/submit")

    def approve_timesheet(self, timesheet_id: str, reviewer_id: str) -> None:
        logger.info(f"Approving timesheet {timesheet_id} (reviewer {reviewer_id})")
        self._post(f"timesheets/{timesheet_id}/approve", {"reviewerId": reviewer_id})

    def reject_timesheet(self, timesheet_id: str, reviewer_id: str, reason: str) -> None:
        logger.info(f"Rejecting timesheet {timesheet_id} (reviewer {reviewer_id})")
        self._post(
            f"timesheets/{timesheet_id}/reject",
            {"reviewerId": reviewer_id, "reason": reason},
        )

    def reopen_timesheet(self, timesheet_id: str) -> None:
        logger.info(f"Reopening timesheet {timesheet_id}")
        self._post(f"timesheets/{timesheet_id}/reopen")

    def fetch_timesheets(self, scope_filter: Optional[TeamReviewFilter] = None) -> List[Timesheet]:
        """
        Fetch timesheets visible to the session.

        Records that do not parse as timesheets are logged and skipped.

        Args:
            scope_filter: Optional server-side filter

        Returns:
            List of timesheets
        """
        params = scope_filter.to_query_params() if scope_filter else {}
        key = ("timesheets", tuple(sorted(params.items())))

        def _load():
            return self._get("timesheets", params=params)

        body = self.cache.get_or_load(key, _load) if self.cache is not None else _load()
        records = body.get("timesheets", []) if isinstance(body, dict) else body

        timesheets: List[Timesheet] = []
        for record in records or []:
            try:
                timesheets.append(parse_timesheet(record))
            except ValidationError as e:
                logger.warning(
                    f"Skipping invalid timesheet record {record.get('id') or record.get('_id')}: "
                    f"{e.error_count()} validation error(s)"
                )
        logger.debug(f"Fetched {len(timesheets)} timesheet(s)")
        return timesheets

    def fetch_timesheet(self, timesheet_id: str) -> Timesheet:
        """Fetch a single timesheet by id (not cached)."""
        body = self._get(f"timesheets/{timesheet_id}")
        record = body.get("timesheet", body) if isinstance(body, dict) else body
        return parse_timesheet(record)

    def fetch_team_scope(self, actor_id: str) -> TeamScope:
        """
        Fetch the approver's team scope (``user_id -> project_ids``).

        Args:
            actor_id: Approver user id

        Returns:
            TeamScope snapshot
        """
        key = ("team-scope", actor_id)

        def _load():
            return self._get(f"users/{actor_id}/team-scope")

        body = self.cache.get_or_load(key, _load) if self.cache is not None else _load()
        mapping = body.get("scope", body) if isinstance(body, dict) else {}
        return TeamScope.from_mapping(mapping or {})

    def close(self) -> None:
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def create_api_client(config) -> TimesheetApiClient:
    """Build a TimesheetApiClient from a ReviewSystemConfig."""
    return TimesheetApiClient(
        base_url=config.api_base_url,
        token=config.api_token,
        timeout=config.request_timeout,
        retry_handler=RetryHandler(max_retries=config.max_retries, base_delay=config.retry_delay),
        cache=ResponseCache(
            ttl_seconds=config.cache_ttl_seconds, max_size=config.cache_max_size
        ),
    )
