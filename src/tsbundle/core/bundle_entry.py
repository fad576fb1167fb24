"""
Wire format of a single module definition in the bundle.

On the wire an entry is a JSON array of variable length:

    [name, code]
    [name, dependencies, code]
    [name, dependencies, metadata, code]

The shortest form that carries the needed information is always used. Here
the entry is a plain record; only to_wire()/from_wire() deal with positions.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BundleEntryMeta(BaseModel):
    """
    Extra information the loader needs about some modules.

    Attributes:
        export_refs: Modules re-exported wholesale, sorted
        exports: Exported names, sorted
        arbitrary_type: Module value is opaque ("export =")
        alt_name: Secondary name of the module
    """

    export_refs: list[str] = Field(default_factory=list)
    exports: list[str] = Field(default_factory=list)
    arbitrary_type: bool = False
    alt_name: str | None = None

    model_config = ConfigDict(frozen=True)

    def to_wire(self) -> dict[str, Any]:
        """Render as a JSON object, leaving out every field that has its default value."""
        wire: dict[str, Any] = {}
        if self.export_refs:
            wire["exportRefs"] = list(self.export_refs)
        if self.exports:
            wire["exports"] = list(self.exports)
        if self.arbitrary_type:
            wire["arbitraryType"] = True
        if self.alt_name:
            wire["altName"] = self.alt_name
        return wire

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> BundleEntryMeta:
        return cls(
            export_refs=data.get("exportRefs", []),
            exports=data.get("exports", []),
            arbitrary_type=data.get("arbitraryType", False),
            alt_name=data.get("altName"),
        )


class BundleEntry(BaseModel):
    """One module definition of the bundle."""

    name: str
    dependencies: list[str] = Field(default_factory=list)
    meta: BundleEntryMeta | None = None
    code: str

    model_config = ConfigDict(frozen=True)

    def to_wire(self) -> list[Any]:
        """Render as the shortest positional array carrying all information."""
        if self.meta is not None:
            return [self.name, list(self.dependencies), self.meta.to_wire(), self.code]
        if self.dependencies:
            return [self.name, list(self.dependencies), self.code]
        return [self.name, self.code]

    @classmethod
    def from_wire(cls, data: list[Any]) -> BundleEntry:
        """
        Parse a positional array back into an entry.

        Raises:
            ValueError: If the array has an unsupported shape
        """
        if len(data) == 2:
            name, code = data
            return cls(name=name, code=code)
        if len(data) == 3:
            name, deps, code = data
            return cls(name=name, dependencies=deps, code=code)
        if len(data) == 4:
            name, deps, meta, code = data
            return cls(name=name, dependencies=deps, meta=BundleEntryMeta.from_wire(meta), code=code)
        raise ValueError(f"Bundle entry must have 2 to 4 items, got {len(data)}")
