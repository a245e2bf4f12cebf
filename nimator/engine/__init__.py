"""Engine subsystem — result model, layers, failure flattening, runner."""

from .clock import Clock, SteppingClock, SystemClock
from .core import ConfigurationError, LayerContractError, NimatorEngine
from .failures import Failure, describe_exception, flatten_failure
from .layer import Check, Layer, run_check
from .models import (
    CheckResult,
    LayerResult,
    NimatorResult,
    NotificationLevel,
    ResultKind,
    max_level,
    render_plain_text,
)
