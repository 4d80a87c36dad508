from __future__ import annotations

from typing import Protocol, Sequence

from .model import Site


class SiteDirectory(Protocol):
    """Read-only source of the sites an employee can pick from."""

    def list_sites(self) -> Sequence[Site]:
        raise NotImplementedError
