# FILE: src/healpix_field_viewer/io/field_file_io.py
from __future__ import annotations

import json
import os
from typing import Any, Dict

import torch


def _parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)


def save_field_tensor(path: str, values: torch.Tensor) -> None:
    """Flat float32 CPU copy of the pixel values."""
    if values.ndim != 1:
        raise ValueError(f"Expected a flat [npix] tensor, got shape {tuple(values.shape)}")
    _parent_dir(path)
    torch.save(values.detach().to(device="cpu", dtype=torch.float32).contiguous(), path)


def load_field_tensor(path: str, expected_pixels: int | None = None) -> torch.Tensor:
    values = torch.load(path, map_location="cpu", weights_only=True)
    if not isinstance(values, torch.Tensor) or values.ndim != 1:
        raise ValueError(f"{path} does not hold a flat pixel tensor")
    if expected_pixels is not None and values.shape[0] != expected_pixels:
        raise ValueError(f"{path} holds {values.shape[0]} pixels, expected {expected_pixels}")
    return values


def save_json(path: str, obj: Dict[str, Any]) -> None:
    _parent_dir(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2)
        f.write("\n")


def load_json(path: str) -> Dict[str, Any]:
    """Reads a JSON object; anything else (list, number, bad syntax) is a ValueError."""
    with open(path, "r", encoding="utf-8") as f:
        obj = json.load(f)
    if not isinstance(obj, dict):
        raise ValueError(f"{path} does not hold a JSON object")
    return obj
