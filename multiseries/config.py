"""multiseries configuration loaded from environment variables."""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# ============================================================================
# Summation Parameters
# ============================================================================

# Target bound on the discarded tail of a truncated series
DEFAULT_TOLERANCE = float(os.getenv('DEFAULT_TOLERANCE', '1e-12'))

# Hard cap on the number of terms any truncated sum may use
MAX_TERMS = int(os.getenv('MAX_TERMS', '400'))

# ============================================================================
# Radius Estimation
# ============================================================================

# Number of coefficients inspected by the Cauchy-Hadamard estimate and the
# norm-bound checks
RADIUS_WINDOW = int(os.getenv('RADIUS_WINDOW', '60'))

# ============================================================================
# Change of Origin
# ============================================================================

# Worker threads used to evaluate per-degree blocks (1 disables the pool)
SHIFT_MAX_WORKERS = int(os.getenv('SHIFT_MAX_WORKERS', '1'))

# Absolute tolerance used when testing a coefficient tensor for symmetry
SYMMETRY_TOLERANCE = float(os.getenv('SYMMETRY_TOLERANCE', '1e-12'))

# ============================================================================
# Logging Configuration
# ============================================================================

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
LOG_FILE = os.getenv('LOG_FILE', '')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'detailed')


# ============================================================================
# Validation
# ============================================================================

def validate_config() -> None:
    """Validate configuration values."""
    errors = []

    if not (0 < DEFAULT_TOLERANCE < 1):
        errors.append("DEFAULT_TOLERANCE must be between 0 and 1")

    if MAX_TERMS < 1:
        errors.append("MAX_TERMS must be at least 1")

    if RADIUS_WINDOW < 2:
        errors.append("RADIUS_WINDOW must be at least 2")

    if RADIUS_WINDOW > MAX_TERMS:
        errors.append("RADIUS_WINDOW must be <= MAX_TERMS")

    if SHIFT_MAX_WORKERS < 1:
        errors.append("SHIFT_MAX_WORKERS must be at least 1")

    if SYMMETRY_TOLERANCE < 0:
        errors.append("SYMMETRY_TOLERANCE must be non-negative")

    if LOG_FORMAT not in ('json', 'detailed', 'simple'):
        errors.append("LOG_FORMAT must be one of json, detailed, simple")

    if errors:
        raise ValueError("Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors))


# ============================================================================
# Logging Setup
# ============================================================================

def setup_logging() -> None:
    """Configure logging based on config settings."""
    import logging
    import sys

    # Map log level string to logging constant
    level = getattr(logging, LOG_LEVEL, logging.INFO)

    # Configure format
    if LOG_FORMAT == 'json':
        # JSON format for structured logging
        format_string = '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", "message": "%(message)s"}'
    elif LOG_FORMAT == 'detailed':
        format_string = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    else:  # simple
        format_string = '%(levelname)s: %(message)s'

    handlers = []

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(logging.Formatter(format_string))
    handlers.append(stdout_handler)

    if LOG_FILE:
        file_handler = logging.FileHandler(LOG_FILE)
        file_handler.setFormatter(logging.Formatter(format_string))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        handlers=handlers,
        force=True
    )

    logging.getLogger('multiseries').setLevel(level)


# ============================================================================
# Initialization
# ============================================================================

# Validate config on import; logging is left to the application
validate_config()
