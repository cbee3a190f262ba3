"""
Constants Module

Centralized location for all magic numbers and hardcoded values used throughout
the proof-of-work library. Changing NONCE_SIZE or the hash function breaks
compatibility with every proof produced before the change.
"""

# ============================================================================
# Puzzle Format
# ============================================================================

# Number of random bytes in a nonce
NONCE_SIZE = 10

# BLAKE3 output length (bytes)
DIGEST_SIZE = 32

# Highest cost a digest can possibly satisfy
DIGEST_BITS = DIGEST_SIZE * 8

# ============================================================================
# Search Defaults
# ============================================================================

# Default required leading zero bits
DEFAULT_COST = 20

# Default attempt budget for a single search
DEFAULT_METER = 100_000_000

# Number of search worker processes (0 = one per physical core)
DEFAULT_SEARCH_WORKERS = 1

# Wall-clock limit for pooled searches (seconds, None = no limit)
DEFAULT_SEARCH_TIMEOUT = None

# ============================================================================
# Worker Process Configuration
# ============================================================================

# How long a worker blocks on its request queue before rechecking shutdown (seconds)
WORKER_POLL_INTERVAL = 1.0

# How long to wait for a worker to exit after a shutdown request (seconds)
WORKER_JOIN_TIMEOUT = 1.0

# Sleep between response queue polls while waiting for results (seconds)
RESPONSE_POLL_INTERVAL = 0.05

# ============================================================================
# Configuration File
# ============================================================================

# Default configuration file name
DEFAULT_CONFIG_FILE = "pow.yaml"

# ============================================================================
# Logging Configuration
# ============================================================================

# Default log file name
DEFAULT_LOG_FILE = "pow.log"

# Maximum log file size for rotation (bytes) - 10MB
LOG_MAX_SIZE = 10 * 1024 * 1024

# Number of backup log files to keep
LOG_BACKUP_COUNT = 5

# ============================================================================
# Display Configuration
# ============================================================================

# Number of payload bytes shown in log lines
PAYLOAD_DISPLAY_LENGTH = 16

# ============================================================================
# Hashrate Smoothing
# ============================================================================

# Exponential moving average weight for old hashrate values
HASHRATE_EMA_WEIGHT_OLD = 0.9

# Hashrate display threshold for KH/s vs MH/s
HASHRATE_MH_THRESHOLD = 1_000_000
