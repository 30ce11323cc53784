"""
Global constants for the cuetrack engine

Includes:
- Estimator defaults
- Lifecycle thresholds
- Physical constants for rolling objects
- CSV column layouts
"""

# ===== Timing =====
# Nominal detector frame period used by the velocity heuristic (~30 fps)
NOMINAL_FRAME_INTERVAL = 0.033

# Predictions further apart than this many frame periods use time-scaled decay
MULTI_FRAME_DECAY_RATIO = 1.5

# ===== Estimator Defaults =====
DEFAULT_PROCESS_NOISE = 0.05
DEFAULT_MEASUREMENT_NOISE = 0.3
INITIAL_VARIANCE_SCALE = 10.0
MIN_VARIANCE = 0.001
MAX_VARIANCE = 10.0
INITIAL_CONFIDENCE = 0.1
CONFIDENCE_DECAY_FACTOR = 0.99
CONFIDENCE_DECAY_RATE = 0.5       # per second
CONFIDENCE_RESPONSIVENESS = 0.1
VELOCITY_GAIN = 0.1
MIN_MEASUREMENT_CONFIDENCE = 0.01

# ===== Track Lifecycle =====
CONFIDENCE_HISTORY_SIZE = 20
MIN_LOSS_THRESHOLD = 3
PREDICTED_MAX_MISSES = 2
DEFAULT_LOSS_THRESHOLD = 5
MIN_TRACK_CONFIDENCE = 0.01
STABLE_MAX_MISSES = 3
STABLE_MIN_CONFIDENCE = 0.7

# ===== Association =====
DEFAULT_MAX_ASSOCIATION_DISTANCE = 0.5  # meters
DEFAULT_MAX_ACTIVE_TRACKS = 16
DISTANCE_TOLERANCE = 1e-9

# ===== Physics =====
GRAVITY = 9.81
ROLLING_FRICTION = 0.02

# ===== String Constants =====
LOST_REASON_MISSES = "Extended occlusion"
LOST_REASON_CONFIDENCE = "Confidence below floor"

# CSV column names
CSV_OBSERVATION_COLUMNS = [
    'frame', 'timestamp', 'x', 'y', 'z', 'confidence'
]

CSV_TRACK_COLUMNS = [
    'frame', 'timestamp', 'track_id',
    'x', 'y', 'z', 'vx', 'vy', 'vz',
    'confidence', 'state', 'consecutive_misses', 'total_detections',
]
