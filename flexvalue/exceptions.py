class FlexValueError(Exception): ...


class SeriesError(FlexValueError): ...


class ConfigError(FlexValueError): ...


class IngestError(FlexValueError): ...


class FeedError(FlexValueError): ...


class UnknownEntityError(FlexValueError, KeyError): ...


def require(condition: bool, message: str, exc: type[FlexValueError] = FlexValueError):
    """Raise the given exception if condition is False."""
    if not condition:
        raise exc(message)
