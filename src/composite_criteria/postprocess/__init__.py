from .messages import FAILURE_CODES, Message, MessageCode, Messenger
from .report import CriteriaReportWriter

__all__ = ["FAILURE_CODES", "Message", "MessageCode", "Messenger", "CriteriaReportWriter"]
