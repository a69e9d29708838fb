"""
Configuration constants for the catbot rover.

All tunable parameters in one place. Values that can change at runtime
are mirrored in params.Parameters; these are their defaults.
"""

# =============================================================================
# HARDWARE PORTS
# =============================================================================

# Microcontroller board (wheel servos + IR sensor)
BOARD_PORT = "/dev/ttyACM0"
BOARD_BAUDRATE = 57600

# Wheel servo pins (continuous rotation)
LEFT_WHEEL_PIN = 5
RIGHT_WHEEL_PIN = 6

# Rotation that drives each wheel forward. The servos are mounted mirrored,
# so the right one has to spin the other way.
WHEEL_FORWARD_ROTATION = {"left": "cw", "right": "ccw"}

# Sharp GP2Y0A41SK0F short range IR sensor
PROXIMITY_PIN = 0  # A0
PROXIMITY_FREQUENCY_HZ = 10

# =============================================================================
# WHEEL SPEEDS (0.0 - 1.0 of full servo speed)
# =============================================================================

NORMAL_SPEED = 0.04
REVERSE_SPEED = 0.025
TURNING_SPEED = 0.03

# =============================================================================
# OBSTACLE AVOIDANCE
# =============================================================================

MIN_PROXIMITY = 8.0  # cm - closer than this while moving = obstacle
MAX_PROXIMITY = 25.0  # cm - "nothing there" value for out of range readings

TURN_DURATION = 1.0  # s
BACKUP_DURATION = 0.65  # s
RECORDING_DURATION = 1.5  # s - look window when deciding a direction

# Stuck-in-a-corner heuristic
MAX_RECENT_TURNS = 3
RECENT_TURNS_TIMEFRAME = 15.0  # s

# =============================================================================
# LIFECYCLE
# =============================================================================

# Time given to subscribers to react to SHUTTING_DOWN / CRASHING before exit
SHUTDOWN_GRACE_PERIOD = 1.5  # s
ERROR_EXIT_DELAY = 1.5  # s

# =============================================================================
# LOGGING
# =============================================================================

LOG_FILE = "catbot.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# =============================================================================
# WEB INTERFACE
# =============================================================================

WEB_HOST = "0.0.0.0"
WEB_PORT = 8080
