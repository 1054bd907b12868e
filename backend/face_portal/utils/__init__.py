
from .config import settings
from .logger import setup_logging
from .auth import get_upstream, require_portal_uid

__all__ = ["settings", "setup_logging", "get_upstream", "require_portal_uid"]
