"""Logger state shared by the debapps logging package.

Holds the single QueueListener and the flags that guard root logger
initialization. Access it through get_state().
"""

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import queue
    from logging.handlers import QueueListener


class _LoggerState:
    """Container for logger state (avoids module-level mutable globals).

    Attributes:
        lock: Thread lock for root logger initialization
        root_initialized: Whether the root "debapps" logger has handlers
        config_applied: Whether settings.conf levels have been applied
        queue_listener: Background thread draining the log queue
        log_queue: Queue shared by every debapps logger

    """

    def __init__(self) -> None:
        """Initialize logger state."""
        self.lock = threading.Lock()
        self.root_initialized = False
        self.config_applied = False
        self.queue_listener: QueueListener | None = None
        self.log_queue: queue.Queue | None = None


_state = _LoggerState()


def get_state() -> _LoggerState:
    """Return the logger state instance."""
    return _state
