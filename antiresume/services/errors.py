class BackendError(Exception):
    """Persistence layer failed (unreachable, malformed response, constraint race).

    Never cached. The API layer maps it to a 500.
    """


class CacheKeyCollisionError(Exception):
    """Two cacheable queries were registered under the same name."""


class ProfileNotFoundError(Exception):
    pass


class UsernameTakenError(Exception):
    pass


class ResumeExistsError(Exception):
    pass


class ResumeNotFoundError(Exception):
    pass


class InvalidInputError(ValueError):
    pass
