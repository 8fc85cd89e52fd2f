"""Mirror surface error taxonomy."""


class MirrorError(Exception):
    """Base class for detached view failures."""


class UnsupportedSurface(MirrorError):
    """Raised when the host environment cannot create detached views."""


class SurfaceCreationDenied(MirrorError):
    """Raised when a detached view request is refused or never completes."""


class SurfaceClosedError(MirrorError):
    """Raised by a surface asked to deliver a message after it closed."""
