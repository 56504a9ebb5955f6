"""Timer lifecycle manager.

Keeps the client's view of "is a timer running, and for what" consistent
with the server, where a user has at most one open time entry. State only
changes after the server confirms an operation; a failed call leaves the
session and the cache as they were.
"""
import asyncio
import logging
from datetime import date, datetime, time, tzinfo
from enum import Enum
from typing import Callable, Optional

from pydantic import ValidationError

from kaizen.client.api import KaizenAPI
from kaizen.client.cache import SessionCache
from kaizen.client.session import TimerSession
from kaizen.errors import InvalidInputError, NotFoundError
from kaizen.models.time_entry import TimeEntry
from kaizen.utils.timeutils import (
    calculate_duration,
    ensure_utc,
    resolve_past_interval,
    utc_now,
)

logger = logging.getLogger(__name__)


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class ReconcileOutcome(str, Enum):
    """What a reconciliation did to the local session."""

    UNCHANGED = "unchanged"
    ADOPTED = "adopted"  # server had a timer the client did not know about
    CLEARED = "cleared"  # client believed a timer ran that the server had not
    REFRESHED = "refreshed"  # both ran, but for a different task or start


class TimerManager:
    """Start/stop/discard/adjust operations plus cache reconciliation."""

    def __init__(
        self,
        api: KaizenAPI,
        cache: SessionCache,
        user_key: str,
        clock: Callable[[], datetime] = utc_now,
        tick_interval: float = 1.0,
    ):
        self.api = api
        self.cache = cache
        self.user_key = user_key
        self.clock = clock
        self.tick_interval = tick_interval
        self.session: Optional[TimerSession] = None

    @property
    def state(self) -> TimerState:
        return TimerState.RUNNING if self.session is not None else TimerState.IDLE

    @property
    def is_running(self) -> bool:
        return self.session is not None

    def _set_session(self, session: TimerSession) -> None:
        self.cache.write(self.user_key, session.model_dump_json())
        self.session = session

    def _clear_session(self) -> None:
        self.cache.clear(self.user_key)
        self.session = None

    def _require_running(self) -> TimerSession:
        if self.session is None:
            raise InvalidInputError("No timer running")
        return self.session

    async def _session_for(self, entry: TimeEntry) -> TimerSession:
        """Build a session snapshot for a server entry via task/project lookups."""
        task = await self.api.get_task(entry.task_id)
        project = await self.api.get_project(task.project_id)
        return TimerSession(
            task_id=task.id,
            task_name=task.name,
            project_id=project.id,
            project_name=project.name,
            project_color=project.color,
            start_time=entry.start_time,
            description=entry.description,
        )

    def restore(self) -> Optional[TimerSession]:
        """Load the cached session, dropping it if it cannot be decoded or parsed."""
        try:
            payload = self.cache.read(self.user_key)
            if payload is None:
                self.session = None
                return None
            self.session = TimerSession.model_validate_json(payload)
        except (UnicodeDecodeError, ValidationError):
            logger.warning("Discarding unreadable cached timer for %s", self.user_key)
            self._clear_session()
        return self.session

    async def load(self) -> ReconcileOutcome:
        """Restore the cached session and reconcile it with the server."""
        self.restore()
        return await self.reconcile()

    async def reconcile(self) -> ReconcileOutcome:
        """
        Bring the local session in line with the server's open entry.

        The server is always asked; the cache is never trusted to match.
        Running it twice with no server change gives the same result.
        """
        active = await self.api.get_active_entry()

        if active is None:
            if self.session is None:
                return ReconcileOutcome.UNCHANGED
            logger.warning("Timer for task %s was stopped elsewhere", self.session.task_id)
            self._clear_session()
            return ReconcileOutcome.CLEARED

        if self.session is None:
            self._set_session(await self._session_for(active))
            logger.info("Adopted running timer on task %s", active.task_id)
            return ReconcileOutcome.ADOPTED

        drift = ensure_utc(active.start_time) - self.session.start_time
        same_start = abs(drift.total_seconds()) < 1
        if self.session.task_id == active.task_id and same_start:
            return ReconcileOutcome.UNCHANGED

        logger.warning(
            "Cached timer (task %s) differs from server (task %s); using server",
            self.session.task_id, active.task_id,
        )
        self._set_session(await self._session_for(active))
        return ReconcileOutcome.REFRESHED

    async def start(
        self,
        task_id: str,
        project_id: Optional[str] = None,
        description: str = "",
    ) -> TimerSession:
        """
        Start a timer on a task.

        The task and project are looked up before anything changes, so an
        unknown or forbidden task leaves a running timer alone. Once they
        resolve, a running timer is stopped with its local description.
        The server also closes any open entry it still has for the user.
        """
        task = await self.api.get_task(task_id)
        project = await self.api.get_project(project_id or task.project_id)

        if self.session is not None:
            await self.stop()

        entry = await self.api.create_entry(
            task_id=task.id,
            start_time=self.clock(),
            description=description,
        )

        session = TimerSession(
            task_id=task.id,
            task_name=task.name,
            project_id=project.id,
            project_name=project.name,
            project_color=project.color,
            start_time=entry.start_time,
            description=entry.description,
        )
        self._set_session(session)
        logger.info("Timer started on task %s", task.id)
        return session

    async def stop(self) -> Optional[TimeEntry]:
        """
        Stop the running timer.

        Returns:
            The closed entry, or None if there was nothing to close on the
            server (the stale local session is cleared in that case)
        """
        if self.session is None:
            return None

        try:
            entry = await self.api.stop_timer(
                end_time=self.clock(),
                description=self.session.description,
            )
        except NotFoundError:
            logger.warning("No running entry on the server; clearing stale timer")
            self._clear_session()
            return None

        self._clear_session()
        logger.info("Timer stopped after %ss", entry.duration)
        return entry

    async def discard(self, keep_remote: bool = False) -> None:
        """
        Drop the running timer without recording it.

        The server's open entry is deleted too, unless ``keep_remote`` is
        set, in which case it stays open and the next reconciliation will
        adopt it again.
        """
        if self.session is None:
            return

        if keep_remote:
            logger.warning("Discarded local timer; the running entry stays on the server")
        else:
            active = await self.api.get_active_entry()
            if active is not None:
                await self.api.delete_entry(active.id)

        self._clear_session()
        logger.info("Timer discarded")

    async def adjust_start_time(self, new_start: datetime) -> Optional[TimeEntry]:
        """
        Move the start of the running timer.

        Raises:
            InvalidInputError: If nothing is running or new_start is in the
                future; the session is left untouched
        """
        session = self._require_running()
        new_start = ensure_utc(new_start)
        if new_start > self.clock():
            raise InvalidInputError("Start time cannot be in the future")

        active = await self.api.get_active_entry()
        if active is None:
            logger.warning("No running entry on the server; clearing stale timer")
            self._clear_session()
            return None

        entry = await self.api.update_entry(active.id, start_time=new_start)
        self._set_session(session.model_copy(update={"start_time": entry.start_time}))
        return entry

    def set_description(self, text: str) -> None:
        """Change the description locally; it is sent on stop or save."""
        session = self._require_running()
        self._set_session(session.model_copy(update={"description": text}))

    async def save_description(self) -> Optional[TimeEntry]:
        """Push the local description to the server's open entry."""
        session = self._require_running()
        active = await self.api.get_active_entry()
        if active is None:
            logger.warning("No running entry on the server; clearing stale timer")
            self._clear_session()
            return None
        return await self.api.update_entry(active.id, description=session.description)

    async def create_past_entry(
        self,
        day: date,
        start: time,
        end: time,
        task_id: str,
        description: str = "",
        tz: Optional[tzinfo] = None,
    ) -> TimeEntry:
        """
        Record a completed interval, independent of the running timer.

        An end time earlier than the start time rolls over to the next day.
        Without ``tz`` the times follow the system's local zone rules for
        that date.

        Raises:
            InvalidInputError: If the interval is empty or in the future
        """
        start_time, end_time = resolve_past_interval(day, start, end, tz, now=self.clock())
        return await self.api.create_entry(
            task_id=task_id,
            start_time=start_time,
            end_time=end_time,
            description=description,
        )

    def logout(self) -> None:
        """Forget the cached session for this user."""
        self._clear_session()

    def elapsed_seconds(self, now: Optional[datetime] = None) -> int:
        """Seconds since the session started, recomputed from the clock."""
        if self.session is None:
            return 0
        if now is None:
            now = self.clock()
        return max(0, calculate_duration(self.session.start_time, now))

    async def run_ticker(
        self,
        callback: Callable[[int], None],
        stop_event: Optional[asyncio.Event] = None,
    ) -> None:
        """
        Call ``callback(elapsed_seconds)`` every tick until ``stop_event``.

        Each tick recomputes from the start time, so the value corrects
        itself after suspension or clock drift.
        """
        while stop_event is None or not stop_event.is_set():
            callback(self.elapsed_seconds())
            await asyncio.sleep(self.tick_interval)
