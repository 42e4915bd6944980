"""Errors raised while a flow is being built or run."""

from __future__ import annotations

import json


class ArtError(Exception):
    """Base class of every error the flow engine raises."""


class UnknownError(ArtError):
    """An error whose cause could not be determined."""

    def __init__(self, info: str) -> None:
        self.info = info
        super().__init__(f"EndCallbackError:{json.dumps(info, ensure_ascii=False)}")


class EndCallbackError(ArtError):
    """A callback run after the flow finished failed."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"EndCallbackError:{cause}")


class ServiceNotFound(ArtError):
    """No service is registered under the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Service[{name}] not found")


class NodeEntityNotFound(ArtError):
    """The plan holds no service entity for the requested node."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Node Service Entity [{name}] not found")


class NextNodeNull(ArtError):
    """A service tried to pass control on past the end of the chain."""

    def __init__(self) -> None:
        super().__init__(
            ">NextNodeNull< next node is null, service node can not call next function."
        )


def as_art_error(err: BaseException) -> ArtError:
    """Return ``err`` as an :class:`ArtError`, wrapping foreign exceptions."""
    if isinstance(err, ArtError):
        return err
    wrapped = ArtError(str(err))
    wrapped.__cause__ = err
    return wrapped