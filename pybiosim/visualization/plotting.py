"""
Plotting utilities.

This module turns sample paths, ensembles and deterministic solutions into
matplotlib figures: step plots of trajectories, ensemble means with
spread, distributions at a time point and phase portraits.

Every function draws on `ax` when one is given, otherwise on a new figure,
and returns the axes. `plt.show()` is only called with ``show=True``.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np

from ..output import Ensemble, SamplePath

DEFAULT_STYLE = 'seaborn-v0_8-whitegrid'


def _axes(ax, figsize, style):
    if ax is not None:
        return ax
    if style:
        plt.style.use(style)
    _, ax = plt.subplots(1, 1, figsize=figsize)
    return ax


def _finish(ax, title, xlabel, ylabel, show, save_path, legend=True):
    ax.set_title(title, fontsize=16)
    ax.set_xlabel(xlabel, fontsize=14)
    ax.set_ylabel(ylabel, fontsize=14)
    if legend and ax.get_legend_handles_labels()[0]:
        ax.legend(loc='best', fontsize=12)
    ax.grid(True, which='both', linestyle='--', linewidth=0.5)
    fig = ax.get_figure()
    fig.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=300, bbox_inches='tight')
        print(f"Plot saved to {save_path}")
    if show:
        plt.show()
    return ax


def _subset(species_names: Sequence[str], species_subset: Optional[List[str]]):
    if not species_subset:
        return list(species_names)
    unknown = [s for s in species_subset if s not in species_names]
    if unknown:
        raise ValueError(f"Species not found: {', '.join(unknown)}")
    return [s for s in species_names if s in species_subset]


def plot_sample_path(path: SamplePath, species_subset: Optional[List[str]] = None,
                     title: Optional[str] = None, ax=None,
                     figsize: Tuple[float, float] = (12, 7), style: str = DEFAULT_STYLE,
                     alpha: float = 0.8, show: bool = False, save_path: Optional[str] = None):
    """
    Plot one sample path as a step function per species.

    Args:
        path (SamplePath): The path to draw
        species_subset (List[str], optional): Subset of species to plot
        title (str, optional): Plot title
        ax (matplotlib.axes.Axes, optional): Axes to draw on
        figsize (Tuple[float, float]): Figure size, when a new figure is made
        style (str): Matplotlib style, when a new figure is made
        alpha (float): Line transparency
        show (bool): Call plt.show() at the end
        save_path (str, optional): Save the figure to this path
    """
    ax = _axes(ax, figsize, style)
    for name in _subset(path.species_names, species_subset):
        ax.step(path.t, path.series(name), where='post', label=name, alpha=alpha)
    return _finish(ax, title or "Sample Path", "Time", "Number of Molecules", show, save_path)


def plot_ensemble(ensemble: Ensemble, species: str, title: Optional[str] = None, ax=None,
                  figsize: Tuple[float, float] = (12, 7), style: str = DEFAULT_STYLE,
                  alpha: float = 0.15, show: bool = False, save_path: Optional[str] = None):
    """Draw every trial of one species faintly and overlay the ensemble mean."""
    ax = _axes(ax, figsize, style)
    for path in ensemble:
        ax.step(path.t, path.series(species), where='post', color='grey', alpha=alpha, lw=0.8)
    if ensemble.shares_save_points():
        mean = ensemble.mean()
        ax.plot(mean.index, mean[species], color='C0', lw=2.5, label=f"mean {species}")
    return _finish(ax, title or f"Ensemble of {len(ensemble)} trials: {species}",
                   "Time", "Number of Molecules", show, save_path)


def plot_mean(ensemble: Ensemble, times=None, species_subset: Optional[List[str]] = None,
              title: Optional[str] = None, ax=None, figsize: Tuple[float, float] = (10, 6),
              style: str = DEFAULT_STYLE, show: bool = False, save_path: Optional[str] = None):
    """Plot the ensemble mean of each species with a band of one standard deviation."""
    ax = _axes(ax, figsize, style)
    mean = ensemble.mean(times)
    std = ensemble.std(times)
    for name in _subset(ensemble.species_names, species_subset):
        line, = ax.plot(mean.index, mean[name], lw=2.5, label=name)
        ax.fill_between(mean.index, mean[name] - std[name], mean[name] + std[name],
                        color=line.get_color(), alpha=0.2)
    return _finish(ax, title or f"Ensemble Mean ({len(ensemble)} trials)",
                   "Time", "Number of Molecules", show, save_path)


def plot_histogram(ensemble: Ensemble, species: str, time: float, bins=None,
                   density: bool = True, title: Optional[str] = None, ax=None,
                   figsize: Tuple[float, float] = (8, 6), style: str = DEFAULT_STYLE,
                   show: bool = False, save_path: Optional[str] = None):
    """Plot the distribution of one species across trials at a given time."""
    ax = _axes(ax, figsize, style)
    counts, edges = ensemble.histogram(species, time, bins=bins, density=density)
    ax.bar(edges[:-1], counts, width=np.diff(edges), align='edge', alpha=0.8, edgecolor='black')
    return _finish(ax, title or f"Distribution of {species} at t={time:g}", species,
                   "Probability" if density else "Count", show, save_path, legend=False)


def plot_phase_portrait(result, species_x: str, species_y: str, trial: Optional[int] = None,
                        title: Optional[str] = None, ax=None, figsize: Tuple[float, float] = (8, 8),
                        style: str = DEFAULT_STYLE, show: bool = False,
                        save_path: Optional[str] = None):
    """
    Create a phase portrait of two species.

    Args:
        result (SamplePath | Ensemble): Path, or ensemble (a single trial or the mean)
        species_x (str): Name of species for x-axis
        species_y (str): Name of species for y-axis
        trial (int, optional): Trial of an ensemble to draw; the mean if None
    """
    if isinstance(result, SamplePath):
        x_data, y_data = result.series(species_x), result.series(species_y)
    elif isinstance(result, Ensemble):
        x_data, y_data = result.phase_portrait(species_x, species_y, trial=trial)
    else:
        raise ValueError("Invalid result format")

    ax = _axes(ax, figsize, style)
    ax.plot(x_data, y_data, 'b-', alpha=0.7, lw=1)
    ax.plot(x_data[0], y_data[0], 'go', markersize=8, label='Start')
    ax.plot(x_data[-1], y_data[-1], 'ro', markersize=8, label='End')
    return _finish(ax, title or f"Phase Portrait: {species_x} vs {species_y}",
                   species_x, species_y, show, save_path)


def plot_ode_solution(result: Dict[str, Any], species_subset: Optional[List[str]] = None,
                      title: Optional[str] = None, ax=None,
                      figsize: Tuple[float, float] = (10, 6), style: str = DEFAULT_STYLE,
                      show: bool = False, save_path: Optional[str] = None):
    """
    Plot the result of `simulate_ode`.

    Args:
        result (Dict[str, Any]): Result dictionary from simulate_ode
        species_subset (List[str], optional): Subset of species to plot
    """
    if not result['success']:
        raise RuntimeError("ODE integration was not successful")

    solution = result['solution']
    names = result['sim_data']['species_names']
    ax = _axes(ax, figsize, style)
    for name in _subset(names, species_subset):
        ax.plot(solution.t, solution.y[names.index(name)], label=name, lw=2.5)
    return _finish(ax, title or "Reaction-Rate Equations", "Time", "Number of Molecules",
                   show, save_path)


def compare_ode_ensemble(ode_result: Dict[str, Any], ensemble: Ensemble,
                         species_subset: Optional[List[str]] = None,
                         title: Optional[str] = None, ax=None,
                         figsize: Tuple[float, float] = (10, 6), style: str = DEFAULT_STYLE,
                         show: bool = False, save_path: Optional[str] = None):
    """Overlay the deterministic solution (dashed) on the ensemble mean (solid)."""
    if not ode_result['success']:
        raise RuntimeError("ODE integration was not successful")

    solution = ode_result['solution']
    names = ode_result['sim_data']['species_names']
    mean = ensemble.mean(solution.t)

    ax = _axes(ax, figsize, style)
    for name in _subset(ensemble.species_names, species_subset):
        line, = ax.plot(mean.index, mean[name], lw=2.5, label=f"{name} (SSA mean)")
        ax.plot(solution.t, solution.y[names.index(name)], '--', color=line.get_color(),
                lw=1.5, label=f"{name} (ODE)")
    return _finish(ax, title or "Stochastic Mean vs Deterministic", "Time",
                   "Number of Molecules", show, save_path)


def plot_simulation_results(results, title: Optional[str] = None, show: bool = True,
                            save_path: Optional[str] = None, **kwargs):
    """
    Plot a simulation result of any kind.

    SamplePaths are drawn as step plots, Ensembles as mean ± std (or, without
    common save points, the first species across trials), and `simulate_ode`
    dictionaries as curves.
    """
    if isinstance(results, SamplePath):
        return plot_sample_path(results, title=title, show=show, save_path=save_path, **kwargs)
    if isinstance(results, Ensemble):
        if results.shares_save_points():
            return plot_mean(results, title=title, show=show, save_path=save_path, **kwargs)
        return plot_ensemble(results, results.species_names[0], title=title, show=show,
                             save_path=save_path, **kwargs)
    if isinstance(results, dict) and 'solution' in results:
        return plot_ode_solution(results, title=title, show=show, save_path=save_path, **kwargs)
    raise ValueError("Cannot detect result type. Expected a SamplePath, Ensemble or simulate_ode result.")
