"""
Analysis Diagnostics.

Notifications raised during a composite failure run carry a fixed numeric
code so that calling tools can react to specific conditions without parsing
text. The :class:`Messenger` keeps every message it receives and forwards
it to the ``composite_criteria.messages`` logger.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional

from composite_criteria.constitutive.failure import Criterion

logger = logging.getLogger("composite_criteria.messages")


class MessageCode(IntEnum):
    """Numeric codes of the diagnostic stream."""

    REPORT_WRITTEN = 129
    OUT_OF_PLANE_STRESS = 132
    MAX_STRESS_FAILED = 290
    TSAI_HILL_FAILED = 291
    TSAI_WU_FAILED = 292
    TSAI_WU_TT_FAILED = 293
    AZZI_TSAI_HILL_FAILED = 294
    MAX_STRAIN_FAILED = 295
    HASHIN_FIBER_TENSION_FAILED = 296
    HASHIN_FIBER_COMPRESSION_FAILED = 297
    HASHIN_MATRIX_TENSION_FAILED = 298
    HASHIN_MATRIX_COMPRESSION_FAILED = 299
    NOTHING_EVALUATED = 300
    NO_FAILURES = 301


FAILURE_CODES: Dict[Criterion, MessageCode] = {
    Criterion.MAX_STRESS: MessageCode.MAX_STRESS_FAILED,
    Criterion.TSAI_HILL: MessageCode.TSAI_HILL_FAILED,
    Criterion.TSAI_WU: MessageCode.TSAI_WU_FAILED,
    Criterion.TSAI_WU_TT: MessageCode.TSAI_WU_TT_FAILED,
    Criterion.AZZI_TSAI_HILL: MessageCode.AZZI_TSAI_HILL_FAILED,
    Criterion.MAX_STRAIN: MessageCode.MAX_STRAIN_FAILED,
    Criterion.HASHIN_FIBER_TENSION: MessageCode.HASHIN_FIBER_TENSION_FAILED,
    Criterion.HASHIN_FIBER_COMPRESSION: MessageCode.HASHIN_FIBER_COMPRESSION_FAILED,
    Criterion.HASHIN_MATRIX_TENSION: MessageCode.HASHIN_MATRIX_TENSION_FAILED,
    Criterion.HASHIN_MATRIX_COMPRESSION: MessageCode.HASHIN_MATRIX_COMPRESSION_FAILED,
}

_TEXT = {
    MessageCode.REPORT_WRITTEN: "Composite failure criteria written to {path}",
    MessageCode.OUT_OF_PLANE_STRESS: (
        "Out-of-plane stress components at location {location} (ID {main_id}.{sub_id}); "
        "the plane stress criteria ignore S33, S13 and S23"
    ),
    MessageCode.NOTHING_EVALUATED: (
        "Composite failure criteria were not evaluated: no material defines enough "
        "fail stress, fail strain or Hashin properties"
    ),
    MessageCode.NO_FAILURES: "No composite failure was found at any location",
}

_FAILURE_TEXT = "{count} location(s) failed the {criterion} criterion"

_WARNING_CODES = {MessageCode.OUT_OF_PLANE_STRESS, *FAILURE_CODES.values()}


@dataclass(frozen=True)
class Message:
    """A single diagnostic."""

    code: MessageCode
    text: str


class Messenger:
    """
    Collects diagnostics and echoes them to the log.

    Example
    -------
    ::

        messenger = Messenger()
        messenger.write(MessageCode.NO_FAILURES)
        assert messenger.count(MessageCode.NO_FAILURES) == 1
    """

    def __init__(self):
        self.messages: List[Message] = []

    def write(self, code: MessageCode, **details) -> Message:
        """Record message ``code``; ``details`` fill in its text."""
        code = MessageCode(code)
        if code in _TEXT:
            text = _TEXT[code].format(**details)
        else:
            criterion = next(c for c, fc in FAILURE_CODES.items() if fc is code)
            text = _FAILURE_TEXT.format(criterion=criterion.value, **details)

        message = Message(code=code, text=text)
        self.messages.append(message)

        level = logging.WARNING if code in _WARNING_CODES else logging.INFO
        logger.log(level, "[%d] %s", int(code), text)
        return message

    def write_failure(self, criterion: Criterion, count: int) -> Message:
        """Record the failure message of ``criterion``."""
        return self.write(FAILURE_CODES[criterion], count=count)

    def count(self, code: MessageCode) -> int:
        """Number of times ``code`` was written."""
        return sum(1 for m in self.messages if m.code == code)

    def codes(self) -> List[MessageCode]:
        """Codes of all messages in the order they were written."""
        return [m.code for m in self.messages]

    def last(self, code: Optional[MessageCode] = None) -> Optional[Message]:
        """Most recent message, optionally restricted to ``code``."""
        for message in reversed(self.messages):
            if code is None or message.code == code:
                return message
        return None
