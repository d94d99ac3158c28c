"""
Layout constants for the practice tree view.
Node dimensions and spacing are in SVG user units.
"""

# Node card dimensions
DEFAULT_NODE_W = 220
DEFAULT_NODE_H = 96

# Horizontal spacing between nodes on the same level
DEFAULT_NODE_SEP = 24

# Vertical spacing between levels (rank separation)
DEFAULT_RANK_SEP = 80

# Canvas padding
DEFAULT_PADDING = 24

# Unit level height used when scoring connection length
DEFAULT_LEVEL_HEIGHT = 1

# Curve control point offset as a fraction of the vertical distance
CURVE_OFFSET_RATIO = 0.5
