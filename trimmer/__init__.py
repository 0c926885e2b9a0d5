"""
Runtime trimming: rasterize a visual, find its opaque bounding box,
apply it to the image's display frame.
"""
__version__ = "1.0.0"
