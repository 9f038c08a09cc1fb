"""
Shared State Module for system_utils package.
Contains process-wide trackers and constants.

It imports NOTHING from the system_utils package to prevent circular imports.
"""
from __future__ import annotations

# ==========================================
# TASK TRACKING
# ==========================================

# Global set to track background tasks and prevent garbage collection
_background_tasks: set = set()

# ==========================================
# STATUS MESSAGES
# ==========================================

STATUS_READY = "Ready"
STATUS_LOADING = "Loading metadata..."
STATUS_FROM_CACHE = "Loaded from cache"
STATUS_OK = "OK"
STATUS_UPDATED = "Updated"
