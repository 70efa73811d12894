# FILE: src/healpix_field_viewer/engine/errors.py
from __future__ import annotations


class FieldViewerError(Exception):
    """Base class for viewer failures."""


class MissingInput(FieldViewerError):
    pass


class LoadFailure(FieldViewerError):
    pass


class ReduceTooLarge(FieldViewerError):
    """Order reduction would leave the map below order 1."""


class UnknownProjectionType(FieldViewerError):
    pass
