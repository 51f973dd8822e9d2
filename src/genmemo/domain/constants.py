"""Centralized constants for the GenMemo core.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Mastery tiers ----------
MIN_TIER = 0
MAX_TIER = 5
PERCENT_PER_TIER = 20
MAX_PERCENT_SCORE = 100

# ---------- Intervals ----------
# Interval (days) reached when an item is answered correctly into each tier.
INTERVAL_STEPS = {0: 1.0, 1: 1.0, 2: 3.0, 3: 7.0, 4: 14.0, 5: 30.0}
MIN_INTERVAL_DAYS = 1.0
MAX_INTERVAL_DAYS = 180.0

# ---------- Mastered classification ----------
DAYS_FOR_MASTERY = 10

# ---------- Decay ----------
DECAY_FLOOR_TIER = MIN_TIER
DECAY_DAYS_PER_STEP = 7

# ---------- Selection ----------
WEAK_TIER = 3
DEFAULT_SESSION_SIZE = 20

# ---------- Answer checking ----------
TYPO_TOLERANCE = ((10, 2), (6, 1))  # (min answer length, allowed edits)
MIN_TYPO_CHECK_LEN = 4

# ---------- Remote / HTTP ----------
DEFAULT_SERVER_URL = "https://www.gruppogea.net/genmemo"
REQUEST_TIMEOUT = 30.0

# ---------- Store namespaces ----------
PROGRESS_NAMESPACE = "progress"
PENDING_NAMESPACE = "pending_sync"
MEMBERSHIP_NAMESPACE = "members"
COLLECTION_NAMESPACE = "collections"
UNCATEGORIZED = "uncategorized"
