"""
Exceptions raised by the dataset, grouping and layout code.
"""

__all__ = ["UnsupportedLayoutError", "UnsupportedUnitsError", "PreconditionError"]


class UnsupportedLayoutError(ValueError):
    """
    No layout is shared by two participants, or a dataset was asked for a
    layout it does not declare.

    Parameters
    ----------
    first, second : `str`
        Names of the participant types (or the layout and the dataset type
        for accessor calls).
    message : `str`, optional
        Overrides the default message.
    """

    def __init__(self, first, second, message=None):
        self.first = first
        self.second = second
        if message is None:
            message = f"No common support between {first} and {second}."
        super().__init__(message)


class UnsupportedUnitsError(ValueError):
    """
    An operation that needs counts or counts-per-second received another unit.
    """

    def __init__(self, units, message=None):
        self.units = units
        if message is None:
            message = f"Unsupported spectral units: {units}. Expected counts or counts / s."
        super().__init__(message)


class PreconditionError(ValueError):
    """
    The inputs to an operation do not satisfy its requirements.
    """
