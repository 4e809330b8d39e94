class HueGraphError(Exception):
    """Base class for everything raised by huegraph."""


class ConfigurationError(HueGraphError):
    """Bridge address or application key missing or unusable."""


class BridgeRequestError(HueGraphError):
    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class StreamDecodeError(HueGraphError):
    """A read from the event stream could not be decoded."""


class UnknownResourceError(HueGraphError):
    pass


class UnknownPropertyError(HueGraphError):
    pass


class UnknownCommandError(HueGraphError):
    pass
