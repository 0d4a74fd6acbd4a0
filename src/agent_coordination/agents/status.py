"""Status transitions for agents.

Free functions over AgentStatus so that the lifecycle rules live in one
place instead of being spread across agent subclasses. OFFLINE is
terminal: every transition below leaves an offline status untouched.
"""

from ..artifacts import utc_now
from ..types import AgentStatus, LifecycleState


def is_offline(status: AgentStatus) -> bool:
    return status.state == LifecycleState.OFFLINE


def mark_ready(status: AgentStatus) -> None:
    """Finish initialization; a no-op for agents that are already running."""
    if is_offline(status):
        return
    if status.state in (LifecycleState.INITIALIZING, LifecycleState.ERROR):
        status.state = LifecycleState.IDLE
    status.is_active = True
    status.last_active_time = utc_now()


def mark_busy(status: AgentStatus, task_id: str) -> None:
    """Enter BUSY at task start."""
    if is_offline(status):
        return
    status.state = LifecycleState.BUSY
    status.current_task = task_id
    status.last_active_time = utc_now()


def mark_finished(status: AgentStatus, success: bool) -> None:
    """Leave BUSY at task end, to IDLE on success and ERROR on failure.

    ERROR is not terminal: the next successful task moves back to IDLE.
    """
    if is_offline(status):
        return
    status.current_task = None
    status.last_active_time = utc_now()
    if success:
        status.success_count += 1
        status.state = LifecycleState.IDLE
    else:
        status.error_count += 1
        status.state = LifecycleState.ERROR


def mark_offline(status: AgentStatus) -> None:
    """Enter the terminal OFFLINE state."""
    status.state = LifecycleState.OFFLINE
    status.is_active = False
    status.current_task = None
