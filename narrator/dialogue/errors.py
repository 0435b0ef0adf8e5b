"""
Dialogue errors.
"""


class ContentNotFoundError(KeyError):
    """A dialogue key is not in the catalog. Always an authoring bug."""

    def __init__(self, key: str, catalog: str = "catalog"):
        super().__init__(key)
        self.key = key
        self.catalog = catalog

    def __str__(self) -> str:
        return f"Dialogue '{self.key}' not found in {self.catalog}"


class CatalogError(ValueError):
    """Authored dialogue content failed to load or validate."""


class GraphError(ValueError):
    """A continuation graph references nodes that do not exist."""


class RunInProgressError(RuntimeError):
    """A run was started while another is playing under the REJECT policy."""
