class ConfigurationUnsupported(Exception):
    """The router's API dialect cannot be polled."""
    pass


class AuthFailure(Exception):
    """The router answered but rejected the credentials."""
    pass


class Unreachable(Exception):
    """Network failure, timeout or unexpected HTTP status."""
    pass


class PersistenceFailure(Exception):
    pass


class PollSetupError(Exception):
    """The run could not load its router registry or attribution snapshot."""
    pass
