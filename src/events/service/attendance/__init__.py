from .manager import AttendanceManager, decide_join_request
from .types import JoinResult

__all__ = ["AttendanceManager", "JoinResult", "decide_join_request"]
