"""Geometry helpers: distances, bounding boxes, segmentation and access links."""

from .access_links import access_links, bezier_access_link
from .geo import bbox_around, bbox_of_points, haversine, haversine_km, path_bbox
from .segmentation import SegmentationEngine, SegmentationPolicy, nearest_indices

__all__ = [
    "SegmentationEngine",
    "SegmentationPolicy",
    "nearest_indices",
    "bezier_access_link",
    "access_links",
    "haversine",
    "haversine_km",
    "bbox_of_points",
    "bbox_around",
    "path_bbox",
]
