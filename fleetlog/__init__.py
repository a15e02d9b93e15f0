from fleetlog.aggregation import summarize
from fleetlog.errors import (ConfigError, ExportFailure, FleetError, NetworkFailure, NotFound,
                             RenderTargetMissing, ValidationFailure)
from fleetlog.filters import FilterSpec

__version__ = "1.0.0"
