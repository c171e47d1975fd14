"""Error taxonomy for the incidence analysis pipeline.

Every error carries the pipeline stage it came from so the run can halt
with a message that names the stage and the reason.
"""

from __future__ import annotations

from typing import Optional


class AnalysisError(Exception):
    """Base class for stage failures"""

    stage = "analysis"

    def __init__(self, message: str, stage: Optional[str] = None):
        if stage is not None:
            self.stage = stage
        self.reason = message
        super().__init__(f"[{self.stage}] {message}")


class LoadError(AnalysisError):
    """Input file missing, unreadable, or not a (date, value) table"""

    stage = "load"


class SeriesError(AnalysisError):
    """Table does not form a gap-free monthly series"""

    stage = "series"


class FitError(AnalysisError):
    """Model fitting failed or the training segment is too short"""

    stage = "fit"
