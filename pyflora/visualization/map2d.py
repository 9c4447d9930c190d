"""
Top-down debug maps of a scatter run using matplotlib.

Shows the noise field that drove placement, the generation area and every
live plant, coloured by whether it came from the initial pass or from
regeneration.
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.patches as patches
from io import BytesIO
from typing import Tuple
from ..misc.logger import create_logger


class ScatterMapVisualizer:
    """
    Static scatter maps for a ScatterEngine.

    Example:
        >>> engine = ScatterEngine(settings, FlatSurfaceSampler())
        >>> engine.generate_all()
        >>> viz = ScatterMapVisualizer(engine)
        >>> viz.save_scatter_overview("scatter.png")
    """

    def __init__(self, engine, figsize: Tuple[int, int] = (10, 10), dpi: int = 120,
                 resolution: int = 128, verbose: bool = True):
        """
        Args:
            engine: ScatterEngine whose population is drawn
            figsize: Figure size in inches (width, height)
            dpi: Image resolution (dots per inch)
            resolution: Noise samples along the longer area side
            verbose: Whether to log progress messages
        """
        self.engine = engine
        self.figsize = figsize
        self.dpi = dpi
        self.resolution = max(2, resolution)
        self.logger = create_logger(verbose=verbose, name="ScatterMap")

        self.colors = {
            'area': '#FFFFFF',
            'initial': '#1B7F3B',       # Green for initial pass
            'regenerated': '#FF8C00',   # Orange for regenerated plants
        }

    def _extent(self):
        (min_x, min_z) = self.engine.settings.area_min
        (max_x, max_z) = self.engine.settings.area_max
        return min_x, max_x, min_z, max_z

    def _create_noise_layer(self, ax, is_regeneration: bool = False, alpha: float = 0.8):
        """Noise heatmap for the requested pass."""
        context = self.engine.context
        if context is None:
            return None
        min_x, max_x, min_z, max_z = self._extent()
        longest = max(max_x - min_x, max_z - min_z)
        nx = max(2, int(self.resolution * (max_x - min_x) / longest))
        nz = max(2, int(self.resolution * (max_z - min_z) / longest))
        xs = np.linspace(min_x, max_x, nx)
        zs = np.linspace(min_z, max_z, nz)

        self.logger.info(f"Sampling noise field ({nx}x{nz})...")
        values = self.engine.noise_field.sample_grid(context, xs, zs, is_regeneration)
        return ax.imshow(values, extent=[min_x, max_x, min_z, max_z], origin='lower',
                         cmap='Greens', vmin=0.0, vmax=1.0, alpha=alpha)

    def _create_area_layer(self, ax):
        min_x, max_x, min_z, max_z = self._extent()
        rect = patches.Rectangle((min_x, min_z), max_x - min_x, max_z - min_z,
                                 linewidth=1.5, edgecolor='black', facecolor='none',
                                 linestyle='--', label='Generation area')
        ax.add_patch(rect)

    def _create_plants_layer(self, ax, marker_size: float = 12.0):
        individuals = self.engine.tracker.individuals()
        self.logger.info(f"Drawing {len(individuals)} plants...")

        initial = [ind for ind in individuals if not ind.is_regenerated]
        regenerated = [ind for ind in individuals if ind.is_regenerated]
        for group, key, label in ((initial, 'initial', 'Initial'),
                                  (regenerated, 'regenerated', 'Regenerated')):
            if not group:
                continue
            xs = [ind.position[0] for ind in group]
            zs = [ind.position[2] for ind in group]
            sizes = [marker_size * ind.scale for ind in group]
            ax.scatter(xs, zs, s=sizes, c=self.colors[key], edgecolors='black',
                       linewidths=0.3, label=f'{label} ({len(group)})', zorder=5)

    def _draw(self, show_noise: bool, is_regeneration: bool):
        fig, ax = plt.subplots(figsize=self.figsize, dpi=self.dpi)

        im = self._create_noise_layer(ax, is_regeneration) if show_noise else None
        self._create_area_layer(ax)
        self._create_plants_layer(ax)

        min_x, max_x, min_z, max_z = self._extent()
        pad = 0.02 * max(max_x - min_x, max_z - min_z)
        ax.set_xlim(min_x - pad, max_x + pad)
        ax.set_ylim(min_z - pad, max_z + pad)
        ax.set_xlabel('X (meters)', fontsize=12)
        ax.set_ylabel('Z (meters)', fontsize=12)
        pass_name = 'regeneration' if is_regeneration else 'initial'
        ax.set_title(f"Scatter - {self.engine.settings.name} ({pass_name} noise)",
                     fontsize=14, fontweight='bold')
        ax.set_aspect('equal')

        if im is not None:
            cbar = plt.colorbar(im, ax=ax, shrink=0.8)
            cbar.set_label('Noise value', fontsize=10)

        ax.legend(loc='upper right', framealpha=0.9, fontsize=10)
        plt.tight_layout()
        return fig

    def save_scatter_overview(self, filename: str, show_noise: bool = True,
                              is_regeneration: bool = False) -> str:
        """
        Save the scatter map to an image file.

        Args:
            filename: Output filename (with extension)
            show_noise: Draw the noise field under the plants
            is_regeneration: Draw the regeneration pass noise instead of the initial one

        Returns:
            Path to saved file
        """
        self.logger.info(f"Creating scatter overview: {filename}")
        fig = self._draw(show_noise, is_regeneration)
        fig.savefig(filename, dpi=self.dpi, bbox_inches='tight')
        plt.close(fig)
        self.logger.info(f"✓ Scatter overview saved: {filename}")
        return filename

    def get_scatter_overview_bytes(self, show_noise: bool = True, is_regeneration: bool = False,
                                   format: str = 'PNG') -> bytes:
        """
        Scatter map as image bytes, e.g. for ``PIL.Image.open(BytesIO(data))``.
        """
        fig = self._draw(show_noise, is_regeneration)
        buffer = BytesIO()
        fig.savefig(buffer, format=format.lower(), dpi=self.dpi, bbox_inches='tight')
        plt.close(fig)

        image_bytes = buffer.getvalue()
        buffer.close()
        self.logger.info(f"✓ Scatter overview bytes created ({len(image_bytes)} bytes)")
        return image_bytes


def save_scatter_map(engine, filename: str, **kwargs) -> str:
    """
    Convenience function to quickly save a scatter map.

    Args:
        engine: ScatterEngine to draw
        filename: Output filename
        **kwargs: ``show_noise``/``is_regeneration`` for the map, anything
            else goes to ScatterMapVisualizer

    Returns:
        Path to saved file
    """
    show_noise = kwargs.pop('show_noise', True)
    is_regeneration = kwargs.pop('is_regeneration', False)
    viz = ScatterMapVisualizer(engine, **kwargs)
    return viz.save_scatter_overview(filename, show_noise=show_noise, is_regeneration=is_regeneration)
