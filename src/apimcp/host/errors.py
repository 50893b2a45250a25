"""Error types for the hosting boundary."""


class DescriptionLoadError(Exception):
    """The API description could not be fetched or parsed."""

    def __init__(self, location: str, detail: str = "") -> None:
        self.location = location
        self.detail = detail
        message = f"Cannot load API description from {location}"
        super().__init__(message + (f": {detail}" if detail else ""))


class SettingsError(ValueError):
    """Environment configuration is malformed."""
