"""Central module containing constants and defaults for arclength estimation"""

from __future__ import annotations

###############################################################################
# Adaptive subdivision
###############################################################################

# Hard cap for the recursion depth of the adaptive subdivision
MAX_DEPTH: int = 16

# Parameter at which a segment is split when its error estimate is too large
SPLIT_PARAMETER: float = 0.5

# Accuracy used when the caller does not specify one
DEFAULT_ACCURACY: float = 1e-6

# Accuracy used for reference (ground truth) lengths
REFERENCE_ACCURACY: float = 1e-12


###############################################################################
# Error estimation
###############################################################################

# Scale of the fallback bound (control polygon length - chord length)
CONTROL_POLYGON_ERROR_FACTOR: float = 0.02

# Number of uniform samples used to find the maximum curvature of a segment
CURVATURE_SAMPLES: int = 10

# Number of uniform samples used to find the minimum speed of a segment
MIN_SPEED_SAMPLES: int = 10000


###############################################################################
# Comparison tolerances
###############################################################################

APPROX_RTOL: float = 1e-9
APPROX_ATOL: float = 1e-9
