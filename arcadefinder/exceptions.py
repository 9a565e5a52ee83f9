"""Error taxonomy shared by the repository layer and the HTTP boundary.

Every error carries the HTTP status it maps to and a short human-readable
message. The API renders all of them as ``{"msg": "..."}``.
"""


class ArcadeFinderError(Exception):
    status_code = 500
    default_msg = "Server error"

    def __init__(self, msg: str | None = None):
        self.msg = msg or self.default_msg
        super().__init__(self.msg)

    def to_dict(self) -> dict:
        return {"msg": self.msg}


class ValidationError(ArcadeFinderError):
    """Missing or malformed request fields."""

    status_code = 400
    default_msg = "Invalid request"


class Conflict(ArcadeFinderError):
    """Registration with an email that is already taken."""

    status_code = 400
    default_msg = "User already exists"


class InvalidCredentials(ArcadeFinderError):
    status_code = 400
    default_msg = "Invalid credentials"


class NotFound(ArcadeFinderError):
    status_code = 404
    default_msg = "Not found"


class NotFoundOrUnauthorized(NotFound):
    """The row is missing or belongs to someone else; callers cannot tell which."""

    default_msg = "Comment not found or not authorized"


class Unauthenticated(ArcadeFinderError):
    status_code = 401
    default_msg = "Token is not valid"


class Internal(ArcadeFinderError):
    status_code = 500
    default_msg = "Server error"
