"""Exception hierarchy for ccsummary."""


class CcsummaryError(Exception):
    """Base exception for all ccsummary errors."""


class ProjectsDirectoryError(CcsummaryError):
    """The root's projects directory is missing or cannot be listed."""


class ReportWriteError(CcsummaryError):
    """A report directory or file could not be written."""
