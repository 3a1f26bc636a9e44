"""
Chart collage: render charts, upload them and compose them into one collage.
"""

__version__ = "0.1.0"
