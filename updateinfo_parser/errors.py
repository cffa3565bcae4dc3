"""Exceptions raised while parsing updateinfo feeds."""

from typing import Optional


class UpdateInfoError(Exception):
    """Base class for all updateinfo parser failures."""


class InputUnavailable(UpdateInfoError):
    """The updateinfo input could not be opened or fetched."""


class ConfigInvalid(UpdateInfoError):
    """A configuration value (date, packages file, template) is unusable."""


class MalformedTimestamp(UpdateInfoError):
    """An issued date attribute is not an integer epoch timestamp."""


class MalformedURL(UpdateInfoError):
    """A reference href attribute is not a valid URL."""


class RenderFailure(UpdateInfoError):
    """The output template failed while rendering an update."""


class DecodeFailure(UpdateInfoError):
    """The XML document or one of its update records could not be decoded."""

    def __init__(self, message: str, update_id: Optional[str] = None):
        self.update_id = update_id
        if update_id:
            message = f"{message} (update '{update_id}')"
        super().__init__(message)
