"""
Image Map - clickable regions drawn over a background picture.

Built with PyQt6. Each region links to a folder or note under a storage
root; regions are drawn as rectangles, ellipses or triangles, reshaped by
dragging their vertices, and grouped into profiles with their own images.
"""

__version__ = "1.0.0"
__author__ = "Image Map Team"
