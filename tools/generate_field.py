# FILE: tools/generate_field.py
from __future__ import annotations

import argparse
import json
import os

import healpy as hp
import numpy as np


def smooth_sphere(m: np.ndarray, nside: int, nest: bool, iters: int = 4) -> np.ndarray:
    # Average each pixel with its 8 neighbours a few times.
    ipix = np.arange(m.shape[0])
    nbrs = hp.get_all_neighbours(nside, ipix, nest=nest)  # [8, npix], -1 where missing
    for _ in range(iters):
        vals = np.where(nbrs >= 0, m[nbrs], np.nan)
        m = 0.5 * m + 0.5 * np.nanmean(vals, axis=0)
    return m


def main():
    ap = argparse.ArgumentParser(description="Write a synthetic HEALPix FITS map (+ optional JSON sidecar).")
    ap.add_argument("--out", default="artifacts/synthetic_map.fits")
    ap.add_argument("--order", type=int, default=5)
    ap.add_argument("--nest", action="store_true", help="Write NESTED ordering (default RING)")
    ap.add_argument("--seed", type=int, default=42)
    ap.add_argument("--sidecar", action="store_true", help="Also write <out>.json with example settings")
    args = ap.parse_args()

    nside = 1 << args.order
    npix = hp.nside2npix(nside)
    rng = np.random.default_rng(args.seed)

    theta, phi = hp.pix2ang(nside, np.arange(npix), nest=args.nest)
    m = np.cos(theta) + 0.5 * np.sin(3 * phi) * np.sin(theta) + 0.3 * rng.standard_normal(npix)
    m = smooth_sphere(m, nside, args.nest).astype(np.float32)

    os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
    hp.write_map(args.out, m, nest=args.nest, overwrite=True, dtype=np.float32)

    if args.sidecar:
        with open(args.out + ".json", "w", encoding="utf-8") as f:
            json.dump({
                "order_reduce": 1,
                "use_relief": True,
                "colourmap_type": "viridis",
                "projection": "mercator",
                "projection_radius": 0.5,
            }, f, indent=2)

    print(f"[ok] wrote order {args.order} ({'NESTED' if args.nest else 'RING'}) map to {args.out}")


if __name__ == "__main__":
    main()
