"""Errors raised while rendering an iCal feed."""


class FeedRenderError(Exception):
    """Base class for failures that abort a feed render."""


class ConfigurationError(FeedRenderError):
    """The feed is misconfigured (unknown field, bad timezone, missing date field)."""


class MalformedDateError(FeedRenderError):
    """A stored date value or recurrence rule cannot be parsed."""
