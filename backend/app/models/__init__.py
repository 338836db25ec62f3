from app.models.user import User
from app.models.attendance_session import AttendanceSession
from app.models.attendance_record import AttendanceRecord

__all__ = ["User", "AttendanceSession", "AttendanceRecord"]
