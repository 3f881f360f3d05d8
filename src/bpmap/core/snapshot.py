"""
Snapshot schema.

The snapshot is the only data boundary of the core: the host hands one to
``EntityStore.load`` and gets one back from ``EntityStore.export``. Its JSON
shape is::

    {
        "processes": [
            {"id": "p1", "name": "...", "subProcesses": [
                {"id": "sp1", "name": "...", "systems": ["s1"], "vendors": ["v1"]}
            ]}
        ],
        "systems": [{"id": "s1", "name": "..."}],
        "vendors": [{"id": "v1", "name": "..."}]
    }

Older exports stored systems and vendors directly on the process (and called
vendors "providers"); those records are still accepted on input.
"""

from typing import Any, Dict, List, Optional

import pydantic
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .exceptions import ValidationError


class NamedRecord(BaseModel):
    id: str = Field(min_length=1)
    name: str

    model_config = ConfigDict(extra="ignore")


class SubProcessRecord(NamedRecord):
    systems: List[str] = Field(default_factory=list)
    vendors: List[str] = Field(default_factory=list)


class ProcessRecord(NamedRecord):
    sub_processes: List[SubProcessRecord] = Field(default_factory=list, alias="subProcesses")

    # Flat model: links held by the process itself.
    systems: Optional[List[str]] = None
    vendors: Optional[List[str]] = Field(
        default=None, validation_alias=AliasChoices("vendors", "providers")
    )

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @property
    def is_flat(self) -> bool:
        """True for a legacy record that links systems/vendors directly."""
        return not self.sub_processes and (self.systems is not None or self.vendors is not None)


class Snapshot(BaseModel):
    """Complete, serializable state of an entity store."""
    processes: List[ProcessRecord] = Field(default_factory=list)
    systems: List[NamedRecord] = Field(default_factory=list)
    vendors: List[NamedRecord] = Field(
        default_factory=list, validation_alias=AliasChoices("vendors", "providers")
    )

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @classmethod
    def parse(cls, data: Any) -> "Snapshot":
        """
        Validate raw snapshot data.

        Raises:
            ValidationError: If the data does not match the snapshot schema.
        """
        if isinstance(data, Snapshot):
            return data
        if data is None:
            return cls()
        try:
            return cls.model_validate(data)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Malformed snapshot: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
