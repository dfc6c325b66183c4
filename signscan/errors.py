"""Exception hierarchy for the OCR pipeline."""


class SignScanError(Exception):
    """Base class for pipeline errors."""


class PreprocessError(SignScanError):
    """An image could not be decoded, transformed or written."""


class RecognitionError(SignScanError):
    """The text-recognition engine could not be invoked."""


class AllStrategiesFailed(SignScanError):
    """Every preprocessing recipe and the unprocessed fallback failed.

    Args:
        message: Human-readable summary.
        errors: The individual failures, recipes first, fallback last.
    """

    def __init__(self, message: str, errors: list[BaseException] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])
