"""Raster pre-processing: boundary tracing, simplification and thinning."""

from .contours import boundary_mask, douglas_peucker, trace_contours
from .skeleton import SkeletonResult, binarize, glyph_centerlines, skeleton_paths, zhang_suen

__all__ = ['boundary_mask', 'douglas_peucker', 'trace_contours',
           'SkeletonResult', 'binarize', 'glyph_centerlines', 'skeleton_paths', 'zhang_suen']
