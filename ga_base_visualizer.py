#!/usr/bin/env python3
"""
Base GA Visualization Class
Provides common functionality for all GA visualization components
"""

from datetime import datetime
from typing import Optional, Dict, Any, Tuple
from dataclasses import dataclass
from pathlib import Path

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np


@dataclass
class VisualizationConfig:
    """Configuration for visualization generation"""
    output_dir: str = "ga_visualizations"
    figure_format: str = "png"  # png, pdf, svg
    figure_size: Tuple[int, int] = (14, 10)
    dpi: int = 120
    timestamp_files: bool = True


class BaseGAVisualizer:
    """Base class for all GA visualization components"""

    def __init__(self, config: Optional[VisualizationConfig] = None):
        """Initialize base visualizer

        Args:
            config: Visualization configuration
        """
        self.config = config or VisualizationConfig()

        # Create output directory
        self.output_dir = Path(self.config.output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        # Series colors
        self.series_colors = {
            'best': '#1f77b4',
            'average': '#ff7f0e',
            'fuel': '#2ca02c',
            'trucks': '#d62728'
        }

    def create_subplots(self, nrows: int, ncols: int, title: str = "",
                        figsize: Optional[Tuple[int, int]] = None) -> Tuple[plt.Figure, np.ndarray]:
        """Create matplotlib subplots with consistent styling

        Args:
            nrows: Number of rows
            ncols: Number of columns
            title: Figure title
            figsize: Figure size (width, height)

        Returns:
            Tuple of (figure, axes array)
        """
        figsize = figsize or self.config.figure_size

        fig, axes = plt.subplots(nrows, ncols, figsize=figsize, dpi=self.config.dpi, squeeze=False)
        if title:
            fig.suptitle(title, fontsize=16, fontweight='bold')

        return fig, axes

    def save_figure(self, fig: plt.Figure, filename: str, **kwargs) -> str:
        """Save figure with consistent formatting

        Args:
            fig: Matplotlib figure to save
            filename: Base filename (without extension)
            **kwargs: Additional arguments for savefig

        Returns:
            Full path to saved file
        """
        # Add timestamp if configured
        if self.config.timestamp_files:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"{filename}_{timestamp}"

        filepath = self.output_dir / f"{filename}.{self.config.figure_format}"

        save_kwargs = {
            'dpi': self.config.dpi,
            'bbox_inches': 'tight',
            'facecolor': 'white',
            'edgecolor': 'none'
        }
        save_kwargs.update(kwargs)

        fig.savefig(filepath, **save_kwargs)
        plt.close(fig)

        return str(filepath)

    def add_statistics_table(self, ax: plt.Axes, stats: Dict[str, Any]):
        """Render a two-column statistics table into an empty axes"""
        table_data = []
        for key, value in stats.items():
            if isinstance(value, float):
                formatted_value = f"{value:.4f}" if abs(value) < 0.01 else f"{value:.2f}"
            else:
                formatted_value = str(value)
            table_data.append([key.replace('_', ' ').title(), formatted_value])

        ax.axis('off')
        if not table_data:
            return

        table = ax.table(cellText=table_data, cellLoc='left', loc='center', colWidths=[0.5, 0.3])
        table.auto_set_font_size(False)
        table.set_fontsize(10)
        table.scale(1, 1.5)

        for i in range(len(table_data)):
            table[(i, 0)].set_facecolor('#E8E8E8')
            table[(i, 1)].set_facecolor('#F8F8F8')

    def format_axes(self, ax: plt.Axes, xlabel: str = "", ylabel: str = "",
                    title: str = "", grid: bool = True):
        """Format axes with consistent styling"""
        if xlabel:
            ax.set_xlabel(xlabel, fontsize=11, fontweight='bold')
        if ylabel:
            ax.set_ylabel(ylabel, fontsize=11, fontweight='bold')
        if title:
            ax.set_title(title, fontsize=13, fontweight='bold')

        if grid:
            ax.grid(True, alpha=0.3)

        ax.tick_params(axis='both', which='major', labelsize=9)

    def cleanup(self):
        """Clean up resources"""
        plt.close('all')

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()
