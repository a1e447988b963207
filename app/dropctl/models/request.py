"""Validated operation requests.

The CLI layer turns command-line flags into a Request; everything
downstream consumes only this validated form.
"""

from dataclasses import dataclass

from dropctl.models.entry import Verb


class RequestError(ValueError):
    """Raised when a request is malformed (e.g., missing paths)."""


@dataclass(frozen=True, slots=True)
class Request:
    """A single invocation: one verb and the raw target paths.

    Attributes:
        verb: Operation to perform.
        paths: Unresolved path strings, in the order given by the user.
    """

    verb: Verb
    paths: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate request data after initialization."""
        if self.verb == Verb.LIST:
            if self.paths:
                msg = "The list operation does not take paths"
                raise RequestError(msg)
            return
        if not self.paths:
            msg = f"Missing filepaths for {self.verb.value}"
            raise RequestError(msg)
        if any(not p for p in self.paths):
            msg = "Empty path given"
            raise RequestError(msg)
