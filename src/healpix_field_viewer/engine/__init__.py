# FILE: src/healpix_field_viewer/engine/__init__.py
from .errors import FieldViewerError, LoadFailure, MissingInput, ReduceTooLarge, UnknownProjectionType
from .projection_sync import ProjectionSync, ReprojectionRequest
from .range_scale import RangeScaler, ValueRange
from .reproject import ProjectionBuffers, ProjectionType, reproject
from .resample import downsample
from .spherical_field import Ordering, SphericalField
