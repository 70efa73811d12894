# FILE: src/healpix_field_viewer/cli/hpx_view.py
from __future__ import annotations

import argparse
import logging
import os
from typing import List, Optional, Tuple

import numpy as np

from healpix_field_viewer.engine.errors import FieldViewerError, MissingInput
from healpix_field_viewer.engine.projection_sync import IDENTITY, ProjectionSync, as_quaternion, quat_normalize
from healpix_field_viewer.engine.reproject import ProjectionType, panel_coordinates, project_latlong, reproject
from healpix_field_viewer.engine.session import PreparedField, describe, prepare_field, run_view_loop
from healpix_field_viewer.io.field_export import MANIFEST_NAME, export_reduced_field
from healpix_field_viewer.io.fits_field import load_field
from healpix_field_viewer.io.viewer_config import ViewerConfig, load_viewer_config, sidecar_path
from healpix_field_viewer.viz.colour import ColourMap
from healpix_field_viewer.viz.projection_plot import save_projection

DEFAULT_OUT = "artifacts/hpx_export"


def load_session(args: argparse.Namespace) -> Tuple[ViewerConfig, PreparedField]:
    if not args.path:
        raise MissingInput("no HEALPix FITS file given")
    field = load_field(args.path)
    print(f"Attempt to read JSON config at {sidecar_path(args.path)}...")
    try:
        cfg = load_viewer_config(args.path, args.co or [])
    except ValueError as exc:
        raise SystemExit(f"[error] {exc}") from exc
    prepared = prepare_field(
        args.path,
        field,
        cfg.order_reduce,
        colourmap_input_range=cfg.colourmap_input_range,
        reliefmap_input_range=cfg.reliefmap_input_range,
        reliefmap_output_range=cfg.reliefmap_output_range,
    )
    lo, hi = prepared.field.value_range()
    print(f"pixeldata range: [{lo:g}, {hi:g}]")
    return cfg, prepared


def print_ranges(prepared: PreparedField) -> None:
    c, r = prepared.colour_scale, prepared.relief_scale
    print(f"order: {prepared.source_order} -> {prepared.order} (nside {prepared.field.nside})")
    print(f"colour_range: {c.input_range.as_list()} autoscale={c.autoscale}")
    print(f"relief_range: {r.input_range.as_list()} -> {r.output_range.as_list()} autoscale={r.autoscale}")


def cmd_view(args: argparse.Namespace) -> None:
    import matplotlib.pyplot as plt

    from healpix_field_viewer.viz.sphere_view import MplSphereView

    cfg, prepared = load_session(args)
    cmap = ColourMap(cfg.colourmap_type)
    view = MplSphereView(
        prepared,
        cmap,
        title=describe(prepared, cmap.name),
        use_relief=cfg.use_relief,
        projection=cfg.projection,
    )

    def on_reproject(rotation: np.ndarray) -> None:
        buffers = reproject(prepared.field, prepared.colour_scale, cmap, rotation)
        xy = panel_coordinates(buffers, cfg.projection, cfg.projection_radius, cfg.projection_position)
        view.show_projection(xy, buffers.colours)

    sync = None
    if cfg.projection is not None:
        on_reproject(IDENTITY)
        sync = ProjectionSync.from_initial(view.scene_rotation())

    plt.show(block=False)
    n = run_view_loop(view, sync, on_reproject, wait_s=args.wait_s)

    print("=== view summary ===")
    print_ranges(prepared)
    print(f"reprojections: {n}")


def cmd_project(args: argparse.Namespace) -> None:
    cfg, prepared = load_session(args)
    cmap = ColourMap(cfg.colourmap_type)
    ptype = cfg.projection or ProjectionType.EQUIRECTANGULAR
    try:
        rotation = quat_normalize(as_quaternion(args.rotation))
    except ValueError as exc:
        raise SystemExit(f"[error] bad --rotation: {exc}") from exc

    buffers = reproject(prepared.field, prepared.colour_scale, cmap, rotation)
    xy = project_latlong(buffers.latlong, ptype, cfg.projection_radius)
    save_projection(
        xy,
        buffers.colours,
        ptype,
        prepared.colour_scale,
        cmap.cmap,
        args.out,
        title=describe(prepared, cmap.name),
    )

    print("=== project summary ===")
    print_ranges(prepared)
    print(f"projection: {ptype.value}")
    print(f"[ok] wrote {args.out}")


def cmd_export(args: argparse.Namespace) -> None:
    _cfg, prepared = load_session(args)
    manifest = export_reduced_field(prepared, args.out_dir)

    print("=== export summary ===")
    print_ranges(prepared)
    print(f"manifest: {os.path.join(args.out_dir, MANIFEST_NAME)}")
    print(f"field: {os.path.join(args.out_dir, manifest.field_path)}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="hpx-view", description="HEALPix FITS file viewer")
    p.add_argument("-v", "--verbose", action="store_true")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("path", nargs="?", default=None, help="path/to/fitsfile (config read from <path>.json)")
    common.add_argument(
        "-co", action="append", default=[], metavar="KEY=VALUE",
        help="Override a config key, e.g. -co colourmap_type=viridis -co order_reduce=2",
    )

    sub = p.add_subparsers(dest="cmd", required=True)

    v = sub.add_parser("view", parents=[common], help="Interactive sphere view with optional 2D projection")
    v.add_argument("--wait_s", type=float, default=0.018, help="Event wait per loop tick")
    v.set_defaults(fn=cmd_view)

    pr = sub.add_parser("project", parents=[common], help="Write the 2D projection to a PNG")
    pr.add_argument("--out", default="artifacts/projection.png")
    pr.add_argument("--rotation", type=float, nargs=4, default=[1.0, 0.0, 0.0, 0.0], metavar=("W", "X", "Y", "Z"))
    pr.set_defaults(fn=cmd_project)

    e = sub.add_parser("export", parents=[common], help="Cache the reduced field (.pt) + manifest")
    e.add_argument("--out_dir", default=DEFAULT_OUT)
    e.set_defaults(fn=cmd_export)

    return p


def main(argv: Optional[List[str]] = None) -> None:
    p = build_parser()
    args = p.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        args.fn(args)
    except MissingInput as exc:
        p.print_usage()
        raise SystemExit(f"[error] {exc}") from exc
    except FieldViewerError as exc:
        raise SystemExit(f"[error] {exc}") from exc


if __name__ == "__main__":
    main()
