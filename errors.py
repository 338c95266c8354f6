"""
Error taxonomy for the engagement and moderation layer.

Every failure is raised synchronously to the caller. The FastAPI app renders
them as {"detail": message} with the status code carried by the class.
"""


class CampusError(Exception):
    status_code = 400
    message = "Request failed"

    def __init__(self, message=None):
        self.message = message or self.message
        super().__init__(self.message)


class NotAuthenticated(CampusError):
    status_code = 401
    message = "You must be signed in to do that"


class Forbidden(CampusError):
    status_code = 403
    message = "You are not allowed to do that"


class NotFound(CampusError):
    status_code = 404
    message = "Item not found"


class NotAnActivity(CampusError):
    status_code = 400
    message = "Only activities can be joined"


class AlreadyJoined(CampusError):
    status_code = 409
    message = "You have already joined this activity"


class ActivityFull(CampusError):
    status_code = 409
    message = "This activity is full"


class RateLimited(CampusError):
    status_code = 429
    message = "You're voting too fast, try again in a moment"


class ValidationFailed(CampusError):
    status_code = 422
    message = "Invalid request"


class StoreUnavailable(CampusError):
    status_code = 503
    message = "Database not available"
