"""Core tracker components: configuration, domain types, exceptions."""

from project_tracker.core.config import TrackerConfig
from project_tracker.core.exceptions import *  # noqa: F403
from project_tracker.core.exceptions import __all__ as exceptions__all__
from project_tracker.core.types import *  # noqa: F403
from project_tracker.core.types import __all__ as types__all__

__all__ = ["TrackerConfig"]

__all__ += exceptions__all__
__all__ += types__all__
