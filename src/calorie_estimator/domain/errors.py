"""Error taxonomy shared by the inference client, editing and history."""


class CalorieEstimatorError(Exception):
    """Base class for recoverable application errors."""


class InvalidInputError(CalorieEstimatorError):
    """Input was empty or out of range before any remote call was attempted."""


class AnalysisInProgressError(InvalidInputError):
    """An inference call is already outstanding for this session."""


class InferenceFailureError(CalorieEstimatorError):
    """The remote model call failed (transport, auth, quota or refusal)."""


class MalformedResponseError(InferenceFailureError):
    """The remote model answered, but the payload failed schema validation."""


class PersistenceFailureError(CalorieEstimatorError):
    """Reading or writing local persistent storage failed."""
