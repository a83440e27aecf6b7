class CaptureFrameworkError(RuntimeError):
    """Base class for capture session failures."""


class NavigationError(CaptureFrameworkError):
    """Raised when the page never reached a state worth observing."""


class CaptureError(CaptureFrameworkError):
    """Raised when a screenshot or the mutation buffer is unavailable mid-session."""


class ClassificationInputError(CaptureFrameworkError, ValueError):
    """Raised when a raw change event is missing expected fields."""
