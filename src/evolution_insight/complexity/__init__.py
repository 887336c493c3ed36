"""Function-level complexity: diff scanning, metrics, and trends."""

from .differ import (
    TRANSITIONS,
    Action,
    FunctionScanner,
    LineKind,
    ScanState,
    analyze_complexity,
    classify_line,
    extract_changed_functions,
    measure_change,
)
from .metrics import ComplexityMetrics, compute_complexity
from .models import (
    ComplexityChangeEvent,
    ComplexityTrendResult,
    ExtractedFunction,
    FunctionComplexityChange,
    FunctionComplexitySample,
    FunctionComplexityTrend,
)
from .trends import ComplexityTrendTracker, track_complexity_trends

__all__ = [
    "Action",
    "ComplexityChangeEvent",
    "ComplexityMetrics",
    "ComplexityTrendResult",
    "ComplexityTrendTracker",
    "ExtractedFunction",
    "FunctionComplexityChange",
    "FunctionComplexitySample",
    "FunctionComplexityTrend",
    "FunctionScanner",
    "LineKind",
    "ScanState",
    "TRANSITIONS",
    "analyze_complexity",
    "classify_line",
    "compute_complexity",
    "extract_changed_functions",
    "measure_change",
    "track_complexity_trends",
]
