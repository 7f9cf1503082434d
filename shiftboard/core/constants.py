# shiftboard/core/constants.py
import enum
from typing import Final


# ==========================
# Upcoming shifts
# ==========================

#: Maximum number of shifts shown in the "upcoming" list.
#: The dashboard card shows at most five entries.
DEFAULT_UPCOMING_LIMIT: Final[int] = 5


# ==========================
# Role categories
# ==========================


class CategoryKey(str, enum.Enum):
    """Visual category used by the rendering layer to color a shift badge."""

    CHART_1 = "chart-1"
    CHART_2 = "chart-2"
    CHART_3 = "chart-3"
    CHART_4 = "chart-4"
    DEFAULT = "muted"


#: Exact, case-sensitive role label -> category key.
#: French labels come from the restaurant schedules, English ones are aliases.
ROLE_CATEGORIES: Final[dict[str, CategoryKey]] = {
    "Serveur": CategoryKey.CHART_1,
    "Server": CategoryKey.CHART_1,
    "Barman": CategoryKey.CHART_2,
    "Bartender": CategoryKey.CHART_2,
    "Runner": CategoryKey.CHART_3,
    "Cuisine": CategoryKey.CHART_4,
    "Kitchen": CategoryKey.CHART_4,
}


# ==========================
# Notices
# ==========================

#: Toast shown when loading the shift list fails.
NOTICE_FETCH_FAILED: Final[str] = "Erreur lors du chargement des plannings"

#: Toast shown when the browser grants notification permission.
NOTICE_NOTIFICATIONS_ENABLED: Final[str] = "Notifications activées"


# ==========================
# Date and time
# ==========================

#: Format for shift times in feeds and exports (for example "11:00").
TIME_FORMAT_HM: Final[str] = "%H:%M"

#: Format accepted for shift times with seconds (for example "11:00:00").
TIME_FORMAT_HMS: Final[str] = "%H:%M:%S"

#: Index of the first weekday in Python datetime (0 = Monday).
WEEK_START_WEEKDAY: Final[int] = 0

#: Days per week, used for week boundaries.
DAYS_PER_WEEK: Final[int] = 7

#: Seconds per hour, used when converting durations to hours.
SECONDS_PER_HOUR: Final[int] = 3600


# ==========================
# Sample data
# ==========================

#: Schedule label used by the static sample source.
SAMPLE_SCHEDULE_NAME: Final[str] = "Semaine 4 - Janvier"

#: Role used by the static sample source.
SAMPLE_ROLE: Final[str] = "Serveur"
