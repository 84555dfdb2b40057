"""RFC 9457 Problem Details exception hierarchy.

All API errors extend ProblemDetailError and are converted to
application/problem+json responses by the exception handler middleware.
"""

PROBLEM_BASE_URI = "/problems"
GENERIC_SERVER_ERROR = "An unexpected internal server error occurred. Please try again later."


class ProblemDetailError(Exception):
    def __init__(
        self,
        type_uri: str,
        title: str,
        status: int,
        detail: str,
    ):
        self.type_uri = type_uri
        self.title = title
        self.status = status
        self.detail = detail
        super().__init__(detail)


class NotFoundError(ProblemDetailError):
    def __init__(self, detail: str):
        super().__init__(
            type_uri=f"{PROBLEM_BASE_URI}/not-found",
            title="Not Found",
            status=404,
            detail=detail,
        )


class InvalidInputError(ProblemDetailError):
    def __init__(self, detail: str):
        super().__init__(
            type_uri=f"{PROBLEM_BASE_URI}/invalid-input",
            title="Invalid Input",
            status=400,
            detail=detail,
        )


class DuplicateResourceError(ProblemDetailError):
    def __init__(self, detail: str):
        super().__init__(
            type_uri=f"{PROBLEM_BASE_URI}/duplicate-resource",
            title="Duplicate Resource",
            status=409,
            detail=detail,
        )


class SleepServiceFailureError(ProblemDetailError):
    """Storage faults. The detail is fixed so database errors never reach clients."""

    def __init__(self):
        super().__init__(
            type_uri=f"{PROBLEM_BASE_URI}/sleep-service-error",
            title="Sleep Service Error",
            status=500,
            detail=GENERIC_SERVER_ERROR,
        )


class InvalidDateRangeError(ProblemDetailError):
    def __init__(self, start: str, end: str):
        super().__init__(
            type_uri=f"{PROBLEM_BASE_URI}/invalid-date-range",
            title="Invalid Date Range",
            status=400,
            detail=f"Parameter 'start' ({start}) must not be after 'end' ({end})",
        )


class IncompleteDateRangeError(ProblemDetailError):
    def __init__(self):
        super().__init__(
            type_uri=f"{PROBLEM_BASE_URI}/incomplete-date-range",
            title="Incomplete Date Range",
            status=400,
            detail="Parameters 'start' and 'end' must be given together or not at all.",
        )
