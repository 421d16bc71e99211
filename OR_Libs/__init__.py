"""
OR_Libs - Open Retouch Library Modules

This package contains core functionality for the Open Retouch image editor,
organized into specialized sub-packages:

- ImageEditingLib: Raster buffer, color filters, geometric transforms,
  paint tools and the simulated enhancement engine
- SessionLib: Editor session state and the crop/brush interaction state machines
- BatchLib: Quality compression pipeline and batch export
"""

__version__ = "0.1.0"
