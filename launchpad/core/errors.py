class LaunchError(RuntimeError):
    """Base for failures of external launch collaborators."""


class RemoteConfigError(LaunchError):
    def __init__(self, reason: str, status_code: int = 0):
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code


class OrganicValidationError(LaunchError):
    def __init__(self, reason: str, status_code: int = 0):
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code
