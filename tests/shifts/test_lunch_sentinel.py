from datetime import datetime

from src.shopfloor.shopfloor.core.constants import NO_LUNCH_MARKER
from src.shopfloor.shopfloor.core.enums import LunchStatus
from src.shopfloor.shopfloor.shifts.model import Lunch, lunch_from_columns, lunch_to_columns


def test_skipped_lunch_is_stored_as_marker():
    assert lunch_to_columns(Lunch.skipped()) == (NO_LUNCH_MARKER, None)
    assert lunch_from_columns(NO_LUNCH_MARKER, None).status == LunchStatus.SKIPPED


def test_marker_in_both_columns_is_still_skipped():
    lunch = lunch_from_columns(NO_LUNCH_MARKER, NO_LUNCH_MARKER)

    assert lunch.status == LunchStatus.SKIPPED
    assert lunch.start is None and lunch.end is None


def test_real_lunch_columns_decode_to_states():
    noon = datetime(2025, 3, 10, 12, 0)
    one = datetime(2025, 3, 10, 13, 0)

    assert lunch_from_columns(None, None).status == LunchStatus.NOT_TAKEN
    assert lunch_from_columns(noon, None) == Lunch.in_progress(noon)
    assert lunch_from_columns(noon, one) == Lunch.taken(noon, one)
    assert lunch_to_columns(Lunch.taken(noon, one)) == (noon, one)
