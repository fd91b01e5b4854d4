class AnalysisError(Exception):
    """Base class for G-code analysis failures shown to the user."""

    user_message = "Failed to analyze the G-code file."

    def __init__(self, message=None):
        super().__init__(message or self.user_message)
        if message:
            self.user_message = message


class InputRejected(AnalysisError):
    user_message = "Please select a valid .gcode file."


class ExtractionEmpty(AnalysisError):
    user_message = (
        "Could not find print time, filament weight or filament length "
        "in this G-code file."
    )


class RemoteServiceFailure(AnalysisError):
    user_message = "The AI deep scan failed to analyze the G-code file."


class UnexpectedFailure(AnalysisError):
    user_message = "An unexpected error occurred while reading the G-code file."


class DeepScanError(Exception):
    """Raised by the deep scan when the remote service call fails."""
