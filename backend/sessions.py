"""
Per-session assistant state: the analyzed task list, the chat transcript and
the focus reminder.

A session's task list is only ever replaced by assignment, so a reader never
sees a half-updated list.
"""
import asyncio
import logging
import uuid
from collections.abc import Callable, Iterable
from typing import Optional

from models import Message, ReminderStatus, SessionView, Task
from ranking import RESCUE_SIZE, group_by_bucket, next_task, rank_tasks, top_tasks

logger = logging.getLogger(__name__)

# Reminders never ask for more focus time than this
FOCUS_CAP_MINUTES = 15

GREETING = "Hi! Share your tasks and I will prioritize them into your matrix."
CLEARED = "Cleared. Ready for a new set of tasks."
RERUN = "Re-running your analysis with the same input."
ANALYZING = "Analyzing tasks..."
REMINDERS_STOPPED = "Reminders stopped. We can restart whenever you need."


def format_next(task: Task) -> str:
    return (
        f'Start with: "{task.task}" '
        f"({task.priority_bucket}, {task.estimated_time_minutes} min)."
    )


def format_rescue(tasks: list[Task]) -> str:
    """Reduce-overwhelm message built from the top ranked tasks."""
    lines = [
        f"{idx}) {task.task} ({task.estimated_time_minutes} min)"
        for idx, task in enumerate(tasks, start=1)
    ]
    return (
        f"Take one deep breath. We only need the next {RESCUE_SIZE} steps:\n"
        + "\n".join(lines)
        + "\nStart with step 1 and ignore everything else for now."
    )


def format_reminder(task: Task) -> str:
    minutes = min(task.estimated_time_minutes, FOCUS_CAP_MINUTES)
    return f'Reminder: focus on "{task.task}" for the next {minutes} minutes.'


def format_minutes(minutes: float) -> str:
    return f"{minutes:g}"


class Reminder:
    """
    Repeating callback on the running event loop.

    Idle until start(), Running until stop(). Starting a running reminder or
    stopping an idle one is a no-op that returns False.
    """

    def __init__(self, interval_seconds: float, on_tick: Callable[[], object]):
        self.interval_seconds = interval_seconds
        self._on_tick = on_tick
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def state(self) -> str:
        return "running" if self.running else "idle"

    def start(self) -> bool:
        if self.running:
            return False
        self._task = asyncio.get_running_loop().create_task(self._run())
        return True

    def stop(self) -> bool:
        task, self._task = self._task, None
        if task is None or task.done():
            return False
        task.cancel()
        return True

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                self._on_tick()
            except Exception:
                logger.exception("Reminder tick failed")


class Session:
    def __init__(self, session_id: str, reminder_interval_minutes: float = 15):
        self.id = session_id
        self.last_input = ""
        self.tasks: list[Task] = []
        self.messages: list[Message] = []
        self.reminder_interval_minutes = reminder_interval_minutes
        self.reminder = Reminder(reminder_interval_minutes * 60, self.remind)
        self.say("assistant", GREETING)

    def say(self, role: str, content: str) -> str:
        self.messages.append(Message(role=role, content=content))
        return content

    def replace_tasks(self, tasks: Iterable[Task]) -> None:
        self.tasks = list(tasks)

    def begin_analysis(self, text: str) -> None:
        """Remember ``text`` before the provider call, so a failed run can be re-run."""
        self.last_input = text
        self.say("assistant", ANALYZING)

    def record_analysis(self, text: str, tasks: Iterable[Task]) -> None:
        """Swap in a fresh analysis of ``text``."""
        self.last_input = text
        self.replace_tasks(tasks)
        self.say("assistant", f"Done. I parsed {len(self.tasks)} task(s).")

    def record_failure(self, detail: str) -> None:
        self.say("system", f"Analysis failed: {detail}")

    def clear(self) -> None:
        self.stop_reminders(announce=False)
        self.last_input = ""
        self.tasks = []
        self.messages = []
        self.say("assistant", CLEARED)
        logger.info("Session %s cleared", self.id)

    def recommend_next(self) -> Optional[str]:
        top = next_task(self.tasks)
        if top is None:
            return None
        return self.say("system", format_next(top))

    def rescue(self) -> Optional[str]:
        ranked = top_tasks(self.tasks)
        if not ranked:
            return None
        return self.say("system", format_rescue(ranked))

    def remind(self) -> Optional[str]:
        """One reminder tick; silent when the list has been emptied."""
        top = next_task(self.tasks)
        if top is None:
            return None
        return self.say("system", format_reminder(top))

    def start_reminders(self) -> bool:
        if not self.tasks or not self.reminder.start():
            return False
        logger.info("Session %s reminders started", self.id)
        self.say(
            "assistant",
            "Got it. I will send a focus reminder every "
            f"{format_minutes(self.reminder_interval_minutes)} minutes.",
        )
        return True

    def stop_reminders(self, announce: bool = True) -> bool:
        stopped = self.reminder.stop()
        if stopped:
            logger.info("Session %s reminders stopped", self.id)
        if announce:
            self.say("assistant", REMINDERS_STOPPED)
        return stopped

    def view(self) -> SessionView:
        tasks = self.tasks
        return SessionView(
            session_id=self.id,
            last_input=self.last_input,
            tasks=tasks,
            ranked=rank_tasks(tasks),
            matrix=group_by_bucket(tasks),
            reminder=ReminderStatus(
                state=self.reminder.state,
                interval_minutes=self.reminder_interval_minutes,
            ),
            messages=list(self.messages),
        )


class SessionStore:
    """In-memory sessions for the lifetime of the process."""

    def __init__(self, reminder_interval_minutes: float = 15):
        self.reminder_interval_minutes = reminder_interval_minutes
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> Session:
        session = Session(str(uuid.uuid4()), self.reminder_interval_minutes)
        self._sessions[session.id] = session
        logger.info("Session %s created", session.id)
        return session

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.stop_reminders(announce=False)
        logger.info("Session %s deleted", session_id)
        return True

    def close(self) -> None:
        """Stop every reminder; called on shutdown."""
        for session in self._sessions.values():
            session.stop_reminders(announce=False)
        self._sessions.clear()
