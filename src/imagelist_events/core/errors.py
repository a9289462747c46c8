"""Errors raised while watching Docker events and publishing images."""


class ImageListError(Exception):
    """Base class for all the errors raised by imagelist-docker-events."""


class ConfigurationError(ImageListError):
    """Raised when the startup configuration is missing or invalid."""


class URLParseError(ConfigurationError):
    """Raised when a URL cannot be parsed."""


class RuntimeConnectionError(ImageListError):
    """Raised when a connection to the Docker daemon cannot be established."""


class RuntimeQueryError(ImageListError):
    """Raised when the Docker daemon fails to return image metadata."""


class NoTagError(ImageListError):
    """Raised when an image reference does not carry a tag."""


class NoDigestsFoundError(ImageListError):
    """Raised when an image has no repo digests matching its own name."""


class SerializationError(ImageListError):
    """Raised when an image record cannot be encoded as JSON."""


class TransportError(ImageListError):
    """Raised when a request to the imagelist service could not be sent."""


class ServerError(ImageListError):
    """Raised when the imagelist service fails with a retryable error."""

    def __init__(self, status_code: int):
        super().__init__(f"got http status code {status_code} from imagelist")

        self.status_code = status_code


class ClientError(ImageListError):
    """Raised when the imagelist service rejects a request."""

    def __init__(self, status_code: int):
        super().__init__(f"bad request, status {status_code} from imagelist")

        self.status_code = status_code


class EventStreamError(ImageListError):
    """Raised when reading from the Docker event stream fails."""
