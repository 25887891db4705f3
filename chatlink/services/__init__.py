"""External collaborators reached over HTTP."""

from .platform import PlatformClient, PlatformService

__all__ = ["PlatformClient", "PlatformService"]
