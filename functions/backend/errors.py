"""
Errors raised by the spot map backend adapters and the spot repository.
"""


class SpotMapError(Exception):
    """Base class for spot map errors."""


class UnauthenticatedError(SpotMapError):
    """The operation needs a signed-in user."""


class UnimplementedError(SpotMapError, NotImplementedError):
    """The requested operation is not supported in this version."""


class InvalidArgumentError(SpotMapError, ValueError):
    """A caller-supplied value cannot be stored."""


class SpotNotFoundError(SpotMapError, LookupError):
    def __init__(self, place_id: str):
        super().__init__(
            f"The place ID {place_id} you are trying to delete does not exist"
        )
        self.place_id = place_id


class BlobNotFoundError(SpotMapError, LookupError):
    def __init__(self, storage_path: str):
        super().__init__(f"Object not found: {storage_path}")
        self.storage_path = storage_path


class ImageIdExhaustedError(SpotMapError):
    """No unused image id was found within the retry budget."""
