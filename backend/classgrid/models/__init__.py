from classgrid.models.activity_log import ActivityLog  # noqa: F401
from classgrid.models.change_request import (  # noqa: F401
    ChangeRequest,
    ChangeRequestStatus,
    ReviewDecision,
)
from classgrid.models.room import Room, RoomType  # noqa: F401
from classgrid.models.schedule import Schedule, ScheduleStatus  # noqa: F401
from classgrid.models.schedule_entry import ScheduleEntry  # noqa: F401
from classgrid.models.session_block import SessionBlock  # noqa: F401
from classgrid.models.time_slot import DayGroup, TimeSlot, Weekday  # noqa: F401
from classgrid.models.user import User, UserRole  # noqa: F401
