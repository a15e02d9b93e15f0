class FleetError(Exception):
    """Base class for every failure the fleet client reports."""


class ConfigError(FleetError):
    pass


class NetworkFailure(FleetError):
    def __init__(self, message, url=None, status=None):
        super().__init__(message)
        self.url = url
        self.status = status


class ValidationFailure(FleetError):
    pass


class NotFound(FleetError):
    pass


class RenderTargetMissing(FleetError):
    pass


class ExportFailure(FleetError):
    pass


def describe(exc):
    """User-facing text for an error shown in the page error state or an alert."""
    if isinstance(exc, NetworkFailure) and exc.status is None:
        return (f"Could not reach the record store at {exc.url or '(unknown)'}. "
                "Check FLEET_API_URL and the server's CORS origin.")
    if isinstance(exc, NetworkFailure):
        return f"Record store error ({exc.status}): {exc}"
    if isinstance(exc, ValidationFailure):
        return f"Invalid data: {exc}"
    if isinstance(exc, NotFound):
        return "Record no longer exists."
    if isinstance(exc, RenderTargetMissing):
        return "Report content was not ready for export."
    if isinstance(exc, ExportFailure):
        return f"Could not generate the PDF report: {exc}"
    return str(exc) or exc.__class__.__name__
