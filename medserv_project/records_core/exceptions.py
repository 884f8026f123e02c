""" Error kinds surfaced by the services layer.

    Field/enum violations are raised as Django's own ValidationError
    (400); everything below maps to a fixed HTTP status in views.json_view.
"""


class RecordsError(Exception):
    """Base for error kinds with a fixed HTTP status."""
    status_code = 500


class NotFound(RecordsError):
    """Raised when an entity id does not resolve."""
    status_code = 404

    def __init__(self, entity, identifier=None):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found")


class DuplicateKey(RecordsError):
    """Raised when a unique code (serial/document number, email) is taken."""
    status_code = 400


class UpstreamFailure(RecordsError):
    """Raised when the database is unreachable or a store call times out."""
    status_code = 500


class AuthenticationFailed(RecordsError):
    """Raised on agent login with a bad email/password pair."""
    status_code = 401
