from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# 12-hour clock without an AM/PM marker, kept for compatibility with existing
# backup trees. Runs exactly 12 hours apart produce the same name.
LEGACY_TIMESTAMP_FORMAT = "%Y-%m-%d-%I-%M-%S"
TWENTY_FOUR_HOUR_TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"


def derive_run_name(item_name: str, now: datetime, timestamp_format: str = LEGACY_TIMESTAMP_FORMAT) -> str:
    return f"{item_name}-{now.strftime(timestamp_format)}"


@dataclass(frozen=True)
class NamingPolicy:
    twenty_four_hour: bool = False

    @property
    def timestamp_format(self) -> str:
        if self.twenty_four_hour:
            return TWENTY_FOUR_HOUR_TIMESTAMP_FORMAT
        return LEGACY_TIMESTAMP_FORMAT

    def derive_run_name(self, item_name: str, now: datetime) -> str:
        return derive_run_name(item_name, now, self.timestamp_format)
