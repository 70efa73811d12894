# FILE: src/healpix_field_viewer/io/field_export.py
from __future__ import annotations

import os

from ..engine.session import PreparedField
from ..engine.spherical_field import Ordering, SphericalField
from .field_file_io import load_field_tensor, load_json, save_field_tensor, save_json
from .manifest import FieldManifestV1

MANIFEST_NAME = "manifest_field.json"


def export_reduced_field(prepared: PreparedField, out_dir: str) -> FieldManifestV1:
    """
    Writes the reduced field tensor plus a manifest holding the scaling
    ranges, so a session can be restored without the source FITS file.
    """
    os.makedirs(out_dir, exist_ok=True)
    field = prepared.field
    field_path = f"field_order{field.order}.pt"
    save_field_tensor(os.path.join(out_dir, field_path), field.values)

    manifest = FieldManifestV1(
        schema="hpx_field",
        version=1,
        source_path=prepared.source_path,
        source_order=prepared.source_order,
        order=field.order,
        nside=field.nside,
        ordering=field.ordering.value,
        n_pixels=field.n_pixels,
        order_reduce=prepared.order_reduce,
        colour_range=prepared.colour_scale.input_range.as_list(),
        relief_range=prepared.relief_scale.input_range.as_list(),
        field_path=field_path,
    )
    save_json(os.path.join(out_dir, MANIFEST_NAME), manifest.to_dict())
    return manifest


def load_reduced_field(manifest_path: str) -> tuple[SphericalField, FieldManifestV1]:
    manifest = FieldManifestV1.from_dict(load_json(manifest_path))
    values = load_field_tensor(os.path.join(os.path.dirname(manifest_path), manifest.field_path), manifest.n_pixels)
    field = SphericalField(values=values, nside=manifest.nside, ordering=Ordering(manifest.ordering))
    return field, manifest
