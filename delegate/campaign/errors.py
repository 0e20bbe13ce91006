"""Exception types raised by the campaign orchestrator and its adapters."""


class OrchestratorError(Exception):
    """Base class for orchestrator errors."""


class InvalidConfiguration(OrchestratorError):
    """Campaign cannot be built from the supplied parameters.

    Fatal at construction: the orchestrator refuses to start.
    """


class CollaboratorError(OrchestratorError):
    """An external collaborator (generator, voice, persistence) failed.

    Raised by the HTTP adapters once their retry budget is exhausted.
    The orchestrator never lets this escape a cycle.
    """

    def __init__(self, message: str, *, endpoint: str = "", attempts: int = 0):
        super().__init__(message)
        self.endpoint = endpoint
        self.attempts = attempts
