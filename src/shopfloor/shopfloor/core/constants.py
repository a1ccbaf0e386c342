"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import datetime

DEFAULT_LATE_GRACE_MINUTES = 15
DEFAULT_STANDARD_LUNCH_MINUTES = 60
QR_TOKEN_BYTES = 32

# Stored in shifts.lunch_start (with lunch_end NULL) to mean "explicitly no lunch".
# Only the shift model/repository layer may read or write it.
NO_LUNCH_MARKER = datetime(1970, 1, 1, 0, 0, 0)
