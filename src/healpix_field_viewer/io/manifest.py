# FILE: src/healpix_field_viewer/io/manifest.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass(frozen=True)
class FieldManifestV1:
    schema: str
    version: int
    source_path: str
    source_order: int
    order: int
    nside: int
    ordering: str                    # always "NEST" for reduced fields
    n_pixels: int
    order_reduce: int
    colour_range: List[float]        # [min, max] used for colour scaling
    relief_range: List[float]        # [min, max] used for relief scaling
    field_path: str                  # relative to the manifest directory

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema": self.schema,
            "version": self.version,
            "source_path": self.source_path,
            "source_order": self.source_order,
            "order": self.order,
            "nside": self.nside,
            "ordering": self.ordering,
            "n_pixels": self.n_pixels,
            "order_reduce": self.order_reduce,
            "colour_range": self.colour_range,
            "relief_range": self.relief_range,
            "field_path": self.field_path,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "FieldManifestV1":
        return FieldManifestV1(
            schema=str(d["schema"]),
            version=int(d["version"]),
            source_path=str(d["source_path"]),
            source_order=int(d["source_order"]),
            order=int(d["order"]),
            nside=int(d["nside"]),
            ordering=str(d["ordering"]),
            n_pixels=int(d["n_pixels"]),
            order_reduce=int(d["order_reduce"]),
            colour_range=[float(v) for v in d["colour_range"]],
            relief_range=[float(v) for v in d["relief_range"]],
            field_path=str(d["field_path"]),
        )
