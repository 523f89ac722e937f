"""Errors raised by the tagging core."""


class TagNotFoundError(LookupError):
    """A tag referenced by a mutation does not exist."""

    def __init__(self, tag_id: int):
        super().__init__(f"Tag {tag_id} not found")
        self.tag_id = tag_id


class TagLabelConflictError(ValueError):
    """Renaming a tag would duplicate an existing (type, label) pair."""

    def __init__(self, tag_id: int, tag_type: str, label: str):
        super().__init__(
            f"Cannot rename tag {tag_id}: a '{tag_type}' tag labelled '{label}' already exists"
        )
        self.tag_id = tag_id
        self.tag_type = tag_type
        self.label = label
