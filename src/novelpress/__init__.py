"""NovelPress — serialized-novel authoring and publishing toolkit."""

__version__ = "0.1.0"
