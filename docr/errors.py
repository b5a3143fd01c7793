from __future__ import annotations


class DocrError(Exception):
    """Base class for every failure that aborts a build."""


class ConfigError(DocrError):
    pass


class InputError(DocrError):
    pass


class ConversionError(DocrError):
    pass


class RenderError(DocrError):
    pass


class OutputError(DocrError):
    pass
