"""
Shared constants used across the server.
"""

import re

# Day name list, indexed by the stored day_of_week (0 = Sunday)
DAY_NAMES = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]

# APScheduler cron names for the same indices (its numeric weekdays start on Monday)
CRON_DAY_NAMES = ["sun", "mon", "tue", "wed", "thu", "fri", "sat"]

# 24-hour wall clock time, e.g. "09:30" or "23:05"
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

# Prefix for APScheduler job ids owned by the notification scheduler
JOB_ID_PREFIX = "notification_"

DEFAULT_TEST_MESSAGE = "Test message from SWAB Server! 🚀"
