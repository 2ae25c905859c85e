"""
Lane layout GUI - DearPyGui-based visualization.

Provides:
    - Live lane canvas with draggable nodes and boundary handles
    - Animated zone color transitions
    - Resize-driven simulation rebuilds

Import ``spatial_classifier.gui.app`` explicitly; it requires DearPyGui.
"""
