"""
Visualization module for pyflora.

2D scatter maps (matplotlib):
- Install with: pip install pyflora[viz]
- Provides: ScatterMapVisualizer, save_scatter_map
"""

from .map2d import ScatterMapVisualizer, save_scatter_map

__all__ = ['ScatterMapVisualizer', 'save_scatter_map']
