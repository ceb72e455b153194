"""Shared plotting configuration (style, palette, font sizes)."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import matplotlib as mpl
import seaborn as sns


_RC_KEYS = (
    "axes.titlesize",
    "axes.labelsize",
    "xtick.labelsize",
    "ytick.labelsize",
    "figure.dpi",
    "axes.prop_cycle",
    "font.family",
)


@dataclass
class PlottingConfig:
    """Reusable plotting style that can be applied across report figures."""

    style: str = "whitegrid"
    palette: str | list[str] = "tab10"
    font_family: str = "DejaVu Sans"
    font_scale: float = 1.0
    title_size: int = 14
    label_size: int = 12
    tick_size: int = 10
    figure_dpi: int = 100
    context: str = "notebook"
    heatmap_cmap: str = "Blues"
    seaborn_kwargs: dict[str, Any] = field(default_factory=dict)

    def _rc_params(self) -> dict[str, Any]:
        palette_colors = sns.color_palette(self.palette)
        return {
            "axes.titlesize": self.title_size,
            "axes.labelsize": self.label_size,
            "xtick.labelsize": self.tick_size,
            "ytick.labelsize": self.tick_size,
            "figure.dpi": self.figure_dpi,
            "axes.prop_cycle": mpl.cycler(color=palette_colors),
            "font.family": [self.font_family],
        }

    def apply_global(self) -> None:
        """Apply plotting style globally (no automatic restore).

        For temporary styling (with automatic restoration), use :meth:`apply` instead.
        """
        sns.set_theme(
            style=self.style,
            palette=self.palette,
            context=self.context,
            font_scale=self.font_scale,
            **self.seaborn_kwargs,
        )
        mpl.rcParams.update(self._rc_params())

    @contextmanager
    def apply(self) -> Generator[None]:
        """Apply style within a context, restoring previous rcParams afterwards."""
        prev = {key: mpl.rcParams[key] for key in _RC_KEYS}
        with sns.axes_style(self.style), sns.plotting_context(self.context, font_scale=self.font_scale):
            mpl.rcParams.update(self._rc_params())
            try:
                yield
            finally:
                mpl.rcParams.update(prev)


# Default configuration used across plotting functions
DEFAULT_PLOT_CFG = PlottingConfig()


__all__ = ["DEFAULT_PLOT_CFG", "PlottingConfig"]
