from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

# Application whose UI events are watched; can be overridden by environment variable
TARGET_PACKAGE = os.getenv("SHORTS_GUARD_TARGET_PACKAGE", "com.google.android.youtube")

# Minimum gap between two generic back actions
BACK_ACTION_COOLDOWN_MS = int(os.getenv("SHORTS_GUARD_BACK_COOLDOWN_MS", "100"))

# How long the enabled/schedule check is cached between events
ENABLED_CACHE_MS = int(os.getenv("SHORTS_GUARD_ENABLED_CACHE_MS", "1000"))
