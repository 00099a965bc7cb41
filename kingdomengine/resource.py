from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ResourceDef:
    """Static definition of a resource."""

    key: str
    display_name: str = ""
    initial_amount: float = 0.0
    click_base: float = 0.0

    def __post_init__(self) -> None:
        if not self.display_name:
            self.display_name = self.key
