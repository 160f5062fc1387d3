"""Error kinds surfaced to the host.

Each is recoverable: the public entry points catch them and hand them back in
a result object so the host can show a message and keep its committed value.
Errors raised by caller-supplied formatters or predicates are not wrapped.
"""


class PickerError(Exception):
    """Base class for all picker errors."""

    code = "PICKER_ERROR"

    def __init__(self, message: str, text: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.text = text


class InvalidDateInput(PickerError):
    """Text that does not parse into a valid date or valid range."""

    code = "INVALID_DATE_INPUT"


class DisabledSelectionRejected(PickerError):
    """A candidate date vetoed by the disabled predicate."""

    code = "DISABLED_SELECTION_REJECTED"


class ArityMismatch(PickerError):
    """Piece count does not match the selection mode, even after retrying."""

    code = "ARITY_MISMATCH"


class InvalidRange(PickerError):
    """A range whose start is after its end, or with only one end set."""

    code = "INVALID_RANGE"
