# FILE: tests/test_cli.py
import os
import tempfile

import matplotlib

matplotlib.use("Agg")

import healpy as hp
import numpy as np
import pytest

from healpix_field_viewer.cli.hpx_view import main
from healpix_field_viewer.io.field_export import MANIFEST_NAME
from healpix_field_viewer.io.field_file_io import load_json, save_json


def _write_map(d):
    p = os.path.join(d, "map.fits")
    theta, _ = hp.pix2ang(8, np.arange(768))
    hp.write_map(p, np.cos(theta).astype(np.float32), dtype=np.float32)
    return p


def test_project_writes_png():
    with tempfile.TemporaryDirectory() as d:
        p = _write_map(d)
        save_json(p + ".json", {"projection": "mercator", "order_reduce": 1})
        out = os.path.join(d, "proj.png")
        main(["project", p, "--out", out, "--rotation", "0.9", "0.1", "0", "0", "-co", "colourmap_type=viridis"])
        assert os.path.getsize(out) > 0


def test_export_applies_overrides():
    with tempfile.TemporaryDirectory() as d:
        p = _write_map(d)
        out_dir = os.path.join(d, "export")
        main(["export", p, "--out_dir", out_dir, "-co", "order_reduce=2"])
        m = load_json(os.path.join(out_dir, MANIFEST_NAME))
        assert m["order"] == 1
        assert m["n_pixels"] == 48


def test_missing_input_exits_nonzero():
    with pytest.raises(SystemExit) as e:
        main(["project"])
    assert e.value.code not in (0, None)


def test_reduce_too_large_exits_nonzero():
    with tempfile.TemporaryDirectory() as d:
        p = _write_map(d)
        with pytest.raises(SystemExit) as e:
            main(["export", p, "--out_dir", d, "-co", "order_reduce=3"])
        assert "[error]" in str(e.value.code)


def test_summary_prints_config_path_and_pixel_range(capsys):
    with tempfile.TemporaryDirectory() as d:
        p = _write_map(d)
        main(["export", p, "--out_dir", os.path.join(d, "export")])
        out = capsys.readouterr().out
        assert f"Attempt to read JSON config at {p}.json..." in out
        assert "pixeldata range: [" in out


def test_zero_rotation_exits_with_error():
    with tempfile.TemporaryDirectory() as d:
        p = _write_map(d)
        with pytest.raises(SystemExit) as e:
            main(["project", p, "--rotation", "0", "0", "0", "0", "--out", os.path.join(d, "proj.png")])
        assert "[error]" in str(e.value.code)


def test_missing_fits_file_exits_nonzero():
    with tempfile.TemporaryDirectory() as d:
        with pytest.raises(SystemExit) as e:
            main(["export", os.path.join(d, "nope.fits"), "--out_dir", d])
        assert e.value.code not in (0, None)
        assert "[error]" in str(e.value.code)


def test_corrupt_fits_file_exits_nonzero():
    with tempfile.TemporaryDirectory() as d:
        p = os.path.join(d, "bad.fits")
        with open(p, "wb") as f:
            f.write(b"this is not a FITS file")
        with pytest.raises(SystemExit) as e:
            main(["export", p, "--out_dir", d])
        assert "[error]" in str(e.value.code)
