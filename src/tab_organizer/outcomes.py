# =============================================================================
# Operation Outcomes
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum


class Outcome(Enum):
    SORTED = "sorted"
    ALREADY_SORTED = "already_sorted"
    NOTHING_TO_SORT = "nothing_to_sort"
    SORT_FAILED = "sort_failed"
    DUPLICATES_REMOVED = "duplicates_removed"
    NO_DUPLICATES = "no_duplicates"
    NOTHING_TO_PROCESS = "nothing_to_process"


OUTCOME_MESSAGES = {
    Outcome.SORTED: "Sorted {count} tabs by name",
    Outcome.ALREADY_SORTED: "Tabs are already sorted alphabetically",
    Outcome.NOTHING_TO_SORT: "No tabs found to sort",
    Outcome.SORT_FAILED: "No tabs could be sorted",
    Outcome.DUPLICATES_REMOVED: "Removed {count} duplicate tabs",
    Outcome.NO_DUPLICATES: "No duplicate tabs found",
    Outcome.NOTHING_TO_PROCESS: "No tabs found to process",
}

GROUP_FAILED_MESSAGE = "Could not sort tabs in {label} - it may be a special view"


@dataclass
class OperationResult:
    outcome: Outcome
    count: int = 0
    failed_groups: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return OUTCOME_MESSAGES[self.outcome].format(count=self.count)

    @property
    def warnings(self) -> list[str]:
        return [GROUP_FAILED_MESSAGE.format(label=label) for label in self.failed_groups]
