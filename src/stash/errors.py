class StashError(Exception):
    exit_code = 1


class NotFound(StashError):
    # a missing stash is reported but doesn't fail the process
    exit_code = 0

    def __init__(self, stash_id):
        self.stash_id = stash_id
        super().__init__(f"Stash does not exist: {stash_id}")


class InvalidIdentifier(StashError, ValueError):
    pass


class StashIOError(StashError):
    def __init__(self, action, path, cause: Exception):
        self.action = action
        self.path = path
        self.cause = cause
        reason = getattr(cause, "strerror", None) or str(cause)
        super().__init__(f"failed to {action} {path}: {reason}")
