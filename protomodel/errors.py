"""Errors raised while building the semantic model.

Both signal a malformed upstream request. They are never recovered from:
the build is aborted and the caller decides how to report it.
"""


class ModelBuildError(RuntimeError):
    """Base class for internal-consistency failures during ingest."""


class UnresolvedTypeError(ModelBuildError):
    """A method references a message type missing from the registry."""

    def __init__(self, owner_id: str, type_id: str, known_count: int) -> None:
        self.owner_id = owner_id
        self.type_id = type_id
        self.known_count = known_count
        super().__init__(
            f"{owner_id} references unknown message type {type_id} "
            f"({known_count} messages registered)"
        )


class DuplicateIdentifierError(ModelBuildError):
    """Two declarations resolved to the same identifier."""

    def __init__(self, kind: str, identifier: str) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"Duplicate {kind} identifier: {identifier}")
