"""
Error kinds raised by the evaluation workflow.
Partition errors abort a run; cell failures are recorded per (candidate, fold).
"""


class CVFlowError(RuntimeError):
    """Base class for evaluation workflow errors."""


class InvalidParameter(CVFlowError, ValueError):
    """
    Raised for invalid caller-provided settings (fold count, split size,
    scorer or model family names, fold assignments that do not cover the data).
    """


class EmptyFold(CVFlowError):
    """
    Raised when a partition leaves a training or validation subset empty,
    or when a metric is asked to score zero pairs.
    """

    def __init__(self, message: str, fold: int | None = None):
        super().__init__(message)
        self.fold = fold


class CellFailure(CVFlowError):
    """
    One (candidate, fold) cell failed at `stage`.
    Recorded on the cell's result; never aborts the run.
    """

    stage = "cell"

    def __init__(self, candidate: str, fold: int, error: BaseException):
        super().__init__(
            f"candidate={candidate!r} fold={fold} failed to {self.stage}: "
            f"{type(error).__name__}: {error}"
        )
        self.candidate = candidate
        self.fold = fold
        self.error = error


class FitFailure(CellFailure):
    """A candidate failed to train on one fold."""

    stage = "fit"


class ScoreFailure(CellFailure):
    """A fitted candidate failed to predict or be scored on its validation fold."""

    stage = "score"
