from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Any

from app.logging import setup_logger
from app.services.common.types import (
    CompletionRecord,
    FeedbackStep,
    Session,
    SessionStats,
)
from app.services.messaging.records import CompletionSink, LoggingCompletionSink

DEFAULT_SESSION_TIMEOUT = timedelta(hours=12)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """
    In-memory store of feedback sessions keyed by WhatsApp number.

    The store is the only owner of Session objects; every method hands out
    a copy, so callers never hold a live reference between calls. All
    operations are synchronous dictionary mutations, which keeps them atomic
    with respect to other coroutines on the event loop.
    """

    def __init__(
        self,
        session_timeout: timedelta = DEFAULT_SESSION_TIMEOUT,
        clock: Clock = utcnow,
        record_sink: Optional[CompletionSink] = None,
    ):
        self.logger = setup_logger(__name__)
        self.session_timeout = session_timeout
        self.clock = clock
        self.record_sink = record_sink or LoggingCompletionSink()
        self._sessions: Dict[str, Session] = {}

        self.logger.info(
            f"SessionStore initialized with {session_timeout} session timeout"
        )

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_key: str) -> bool:
        return user_key in self._sessions

    def create(self, user_key: str) -> Session:
        """
        Start a fresh session at step 1, replacing any existing one.

        Args:
            user_key: The user's WhatsApp number

        Returns:
            The new session
        """
        now = self.clock()
        session = Session(user_key=user_key, created_at=now, last_activity=now)
        self._sessions[user_key] = session
        self.logger.info(f"Created new session for {user_key} at step 1")
        return session.model_copy()

    def get(self, user_key: str) -> Session:
        """
        Return the live session for a user, creating one if needed.

        Expired sessions are discarded first, so the result is never expired.
        Refreshes last_activity on a hit.
        """
        session = self._sessions.get(user_key)

        if session is not None and self.is_expired(session):
            self.logger.info(f"Session expired for {user_key}, creating new session")
            del self._sessions[user_key]
            session = None

        if session is None:
            return self.create(user_key)

        session.last_activity = self.clock()
        self.logger.info(
            f"Retrieved existing session for {user_key} at step {int(session.step)}"
        )
        return session.model_copy()

    def update(self, user_key: str, **fields: Any) -> Session:
        """
        Merge fields into a user's session and refresh last_activity.

        Updating a user without a session is logged as an error; a new
        session is created and the update is applied to it.

        Args:
            user_key: The user's WhatsApp number
            fields: Session attributes to change

        Returns:
            The updated session
        """
        session = self._sessions.get(user_key)

        if session is None:
            self.logger.error(f"Attempted to update non-existent session for {user_key}")
            self.create(user_key)
            session = self._sessions[user_key]

        updated = Session.model_validate(
            {
                **session.model_dump(),
                **fields,
                "user_key": user_key,
                "last_activity": self.clock(),
            }
        )
        self._sessions[user_key] = updated
        self.logger.debug(f"Updated session for {user_key}: {fields}")
        return updated.model_copy()

    def advance(self, user_key: str) -> Session:
        """Move a user to the next step; stays put once COMPLETED is reached."""
        session = self.get(user_key)
        next_step = FeedbackStep(min(int(session.step) + 1, int(FeedbackStep.COMPLETED)))
        return self.update(user_key, step=next_step)

    def complete(self, user_key: str) -> Optional[Session]:
        """
        Record a finished submission and remove the session.

        Returns:
            The session as it was before removal, or None if the user had none
        """
        session = self._sessions.get(user_key)

        if session is None:
            self.logger.error(
                f"Attempted to complete non-existent session for {user_key}"
            )
            return None

        self.record_sink.write(self._completion_record(session))

        del self._sessions[user_key]
        self.logger.info(f"Completed and removed session for {user_key}")
        return session.model_copy()

    def reset(self, user_key: str) -> Session:
        """Send a user back to step 1 and clear everything collected so far."""
        self.logger.info(f"Resetting session for {user_key} to step 1")
        return self.update(
            user_key,
            step=FeedbackStep.AWAITING_NAME,
            name="",
            feedback="",
            profile_image_ref="",
        )

    def is_expired(self, session: Session) -> bool:
        return self.clock() - session.last_activity > self.session_timeout

    def sweep_expired(self) -> int:
        """
        Delete every expired session.

        Returns:
            Number of sessions removed
        """
        expired = [
            user_key
            for user_key, session in self._sessions.items()
            if self.is_expired(session)
        ]
        for user_key in expired:
            del self._sessions[user_key]
            self.logger.info(f"Cleaned up expired session for {user_key}")

        if expired:
            self.logger.info(
                f"Cleanup completed: Removed {len(expired)} expired sessions"
            )
        return len(expired)

    def stats(self) -> SessionStats:
        sessions_by_step: Dict[int, int] = {}
        for session in self._sessions.values():
            step = int(session.step)
            sessions_by_step[step] = sessions_by_step.get(step, 0) + 1

        return SessionStats(
            total_active_sessions=len(self._sessions),
            sessions_by_step=sessions_by_step,
            timestamp=self.clock(),
        )

    def _completion_record(self, session: Session) -> CompletionRecord:
        now = self.clock()
        duration = now - session.created_at
        return CompletionRecord(
            timestamp=now,
            user_key=session.user_key,
            name=session.name,
            feedback=session.feedback,
            profile_image_ref=session.profile_image_ref,
            session_duration_minutes=round(duration.total_seconds() / 60),
            completed_at=now,
        )
