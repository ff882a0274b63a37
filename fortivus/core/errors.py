from fastapi import status


class FortivusError(Exception):
    """Base for domain errors; `status_code` is what the API answers with."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationFailed(FortivusError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(FortivusError):
    status_code = status.HTTP_404_NOT_FOUND


class Forbidden(FortivusError):
    status_code = status.HTTP_403_FORBIDDEN


class Conflict(FortivusError):
    status_code = status.HTTP_409_CONFLICT


class SessionNotActive(Conflict):
    def __init__(self, detail: str = "Workout session is not active"):
        super().__init__(detail)


class ActiveSessionExists(Conflict):
    def __init__(self, detail: str = "Active session already exists"):
        super().__init__(detail)


class SetAlreadyCompleted(Conflict):
    def __init__(self, detail: str = "Set is already completed"):
        super().__init__(detail)


class DuplicateExercise(Conflict):
    def __init__(self, detail: str = "Exercise is already in your workout"):
        super().__init__(detail)


class ConfirmationRequired(FortivusError):
    status_code = status.HTTP_428_PRECONDITION_REQUIRED


class ExerciseCreationError(FortivusError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class RemoteFunctionError(FortivusError):
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, detail: str, status_code: int | None = None):
        super().__init__(detail)
        if status_code is not None:
            self.status_code = status_code


class PlanValidationError(FortivusError):
    status_code = status.HTTP_502_BAD_GATEWAY
