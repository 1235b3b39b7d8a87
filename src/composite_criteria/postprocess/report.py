"""
Composite failure report writer.

Writes the reduced criterion values of every location to a tab-separated
text file with CRLF line endings:

    COMPOSITE FAILURE
    Job:	<name>
    Loading:	<value>	<units>
    Main ID	Sub ID	MSTRS	MSTRN	...	HSNMCCRT
    <main id>	<sub id>	<value>	...

The file is written to ``<output directory>/Data Files/composite-criteria.dat``.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import numpy as np

from composite_criteria.constitutive.failure import Criterion
from composite_criteria.core.config import JobConfig
from composite_criteria.postprocess.messages import MessageCode, Messenger

if TYPE_CHECKING:
    from composite_criteria.solvers.aggregate import AggregateReport

logger = logging.getLogger(__name__)

DATA_DIRECTORY = "Data Files"
REPORT_NAME = "composite-criteria.dat"
NEWLINE = "\r\n"


class CriteriaReportWriter:
    """
    Writes the composite failure report of a run.

    Parameters
    ----------
    job : JobConfig
        Job metadata; ``job.output_directory`` is the report root.
    messenger : Messenger
        Receives the report notifications.

    Attributes
    ----------
    path : Path
        Location of the report file.
    """

    def __init__(self, job: JobConfig, messenger: Messenger):
        self.job = job
        self.messenger = messenger
        self.path = Path(job.output_directory) / DATA_DIRECTORY / REPORT_NAME

    def write(self, report: "AggregateReport") -> Optional[Path]:
        """
        Write ``report`` to :attr:`path`.

        Nothing is written when no theory family was evaluated in any region.

        Returns
        -------
        Path or None
            The report file, or None if nothing was written.

        Raises
        ------
        OSError
            If the directory cannot be created or the file cannot be written.
        """
        if not report.any_evaluated:
            self.messenger.write(MessageCode.NOTHING_EVALUATED)
            return None

        if not report.counts.any_failed:
            self.messenger.write(MessageCode.NO_FAILURES)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8", newline="") as handle:
            handle.write(self.format(report))

        logger.info(f"Report written: {len(report.results)} locations")
        self.messenger.write(MessageCode.REPORT_WRITTEN, path=self.path)
        return self.path

    def format(self, report: "AggregateReport") -> str:
        """Report file contents."""
        lines = [
            "COMPOSITE FAILURE",
            f"Job:\t{self.job.name}",
            f"Loading:\t{self.job.load_value:.3g}\t{self.job.load_units}",
            "\t".join(["Main ID", "Sub ID"] + [c.value for c in Criterion]),
        ]

        columns = [report.main_ids, report.sub_ids] + [report.results[c] for c in Criterion]
        table = np.column_stack([np.asarray(c, dtype=float) for c in columns])
        for row in table:
            ids = [f"{value:.0f}" for value in row[:2]]
            values = [f"{value:f}" for value in row[2:]]
            lines.append("\t".join(ids + values))

        return NEWLINE.join(lines) + NEWLINE
