from __future__ import annotations


class MissingCollaboratorError(RuntimeError):
    """A required runtime collaborator (loader, ground probe, audio sink) was not provided at startup."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Missing required collaborator: {name}")
        self.name = str(name)
