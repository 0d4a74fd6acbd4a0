"""Optional interaction observers (self-learning and self-repair hooks).

Observers are injected into the system at construction; a missing
observer is simply an empty list. They are notified after the fact and
can never fail a workflow.
"""

from typing import Any, Iterable, Protocol, runtime_checkable

from .logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class InteractionObserver(Protocol):
    """Receives user interactions and activity signals."""

    def learn_from_user_interaction(self, interaction: dict[str, Any]) -> None: ...

    def monitor_user_activity(self, activity: dict[str, Any]) -> None: ...


def accepted_observers(candidates: Iterable[Any]) -> list[InteractionObserver]:
    """Keep the candidates that implement the observer protocol, warn about the rest."""
    accepted = []
    for candidate in candidates:
        if isinstance(candidate, InteractionObserver):
            accepted.append(candidate)
        else:
            logger.warning(f"ignoring observer {type(candidate).__name__}: missing observer methods")
    return accepted


def notify_observers(
    observers: Iterable[InteractionObserver],
    interaction: dict[str, Any],
    activity: dict[str, Any],
) -> None:
    """Deliver an interaction and an activity signal to every observer."""
    for observer in observers:
        try:
            observer.learn_from_user_interaction(interaction)
            observer.monitor_user_activity(activity)
        except Exception as e:
            logger.error(f"observer {type(observer).__name__} failed: {e}")
