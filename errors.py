"""Exception hierarchy for position analysis and engine communication."""


class AnalysisError(Exception):
    """Base class for every error raised by the analysis layer."""


class InvalidPositionError(AnalysisError, ValueError):
    def __init__(self, message: str = "Invalid FEN position") -> None:
        super().__init__(message)


class InvalidMoveError(AnalysisError, ValueError):
    def __init__(self, message: str = "Invalid move format") -> None:
        super().__init__(message)


class NoEvaluationAvailableError(AnalysisError):
    def __init__(self, message: str = "No evaluation available") -> None:
        super().__init__(message)


class EngineError(AnalysisError):
    """Raised for failures that originate in the engine subprocess."""


class EngineNotReadyError(EngineError):
    def __init__(self, message: str = "Engine not initialized") -> None:
        super().__init__(message)


class EngineStartupError(EngineError):
    pass


class EngineCommunicationError(EngineError):
    """The pipe to the engine broke or the process exited mid-command."""


class UciParseError(EngineError):
    """An ``info`` line from the engine could not be parsed."""


class InvalidSearchRequestError(AnalysisError, ValueError):
    """A search limit was not a positive integer."""
