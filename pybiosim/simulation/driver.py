"""
Simulation dispatch.

`simulate` is the main entry point: it takes a network (or its compiled
ReactionModel), an algorithm selector and the run parameters, and returns a
SamplePath for one trial or an Ensemble for several.
"""

import logging
import time
from typing import Optional, Union

import numpy as np
import pandas as pd
from tabulate import tabulate

from ..config import SimulationConfig
from ..core.compiled import ReactionModel, as_model
from ..output import Ensemble, SamplePath
from .base import PathRecorder, SimulationAlgorithm
from .gillespie import Direct, FirstReaction, SortingDirect
from .next_reaction import NextReaction
from .rejection import RejectionSSA
from .tau_leaping import TauLeaping

logger = logging.getLogger(__name__)

ALGORITHMS = {
    "direct": Direct,
    "first_reaction": FirstReaction,
    "next_reaction": NextReaction,
    "sorting_direct": SortingDirect,
    "rejection": RejectionSSA,
    "tau_leaping": TauLeaping,
}

ALIASES = {
    "ssa": "direct",
    "frm": "first_reaction",
    "nrm": "next_reaction",
    "sdm": "sorting_direct",
    "rssa": "rejection",
    "tau_leap": "tau_leaping",
}


def get_algorithm(algorithm: Union[str, type, SimulationAlgorithm] = "direct",
                  rates_cache: str = "rates") -> SimulationAlgorithm:
    """
    Resolve an algorithm selector to an algorithm instance.

    Args:
        algorithm: A name such as ``"direct"`` or ``"tau-leaping"`` (case and
            hyphens do not matter), an algorithm class, or a configured instance
        rates_cache (str): Rate-cache strategy for the direct method

    Returns:
        SimulationAlgorithm: Ready to be initialized for a trial
    """
    if isinstance(algorithm, SimulationAlgorithm):
        return algorithm

    if isinstance(algorithm, str):
        key = algorithm.strip().lower().replace("-", "_").replace(" ", "_")
        key = ALIASES.get(key, key)
        if key not in ALGORITHMS:
            raise ValueError(
                f"Unknown algorithm '{algorithm}'. Choose one of: {', '.join(ALGORITHMS)}"
            )
        cls = ALGORITHMS[key]
    elif isinstance(algorithm, type) and issubclass(algorithm, SimulationAlgorithm):
        cls = algorithm
    else:
        raise TypeError(f"Cannot use {algorithm!r} as a simulation algorithm")

    if issubclass(cls, Direct):
        return cls(rates_cache=rates_cache)
    return cls()


def simulate_path(model: ReactionModel, algorithm: SimulationAlgorithm, tfinal: float,
                  rng: np.random.Generator, save_points: Optional[np.ndarray] = None,
                  use_numba: bool = False, max_events: Optional[int] = None) -> SamplePath:
    """
    Run one trial from the model's initial state.

    The loop asks the algorithm for the time of the next state change. It
    stops once that time passes `tfinal` or the state is absorbing.
    Otherwise it records save points up to the change and lets the algorithm
    apply it.
    """
    x = model.x0.copy()
    algorithm.initialize(model, x, rng, tfinal=tfinal, use_numba=use_numba)
    recorder = PathRecorder(x, save_points)

    t = 0.0
    t_end = tfinal
    events = 0
    steps = 0
    while t < tfinal:
        if max_events is not None and steps >= max_events:
            logger.warning("Reached max_events=%d at t=%g before tfinal=%g; the path ends early",
                           max_events, t, tfinal)
            t_end = t
            break

        t_next = algorithm.next_time(t, x)
        if t_next > tfinal:
            if np.isinf(t_next):
                logger.debug("No reaction can fire from t=%g; holding the state to tfinal", t)
            break

        recorder.advance(t_next, x)
        events += algorithm.fire(x, t_next)
        steps += 1
        t = t_next
        recorder.jump(t, x)

    recorder.finish(t_end, x)
    times, states = recorder.arrays()
    return SamplePath(times, states, model.species_names, algorithm=algorithm.name,
                      reaction_count=events, steps=steps)


def simulate(model, algorithm="direct", tfinal: Optional[float] = None, save_points=None,
             rates_cache: str = "rates", ntrials: int = 1, seed: Optional[int] = None,
             use_numba: bool = False, max_events: Optional[int] = None,
             config: Optional[SimulationConfig] = None) -> Union[SamplePath, Ensemble]:
    """
    Simulate a reaction network.

    Args:
        model (Network | ReactionModel): The network, or its compiled form
        algorithm: Algorithm name, class or instance (see `get_algorithm`)
        tfinal (float): Final simulation time
        save_points (array-like, optional): Times at which to record the state.
            If None, every jump is recorded.
        rates_cache (str): ``"rates"`` or ``"sums"``, used by the direct method
        ntrials (int): Number of independent trials
        seed (int, optional): Seed for reproducible runs
        use_numba (bool): Use the Numba-compiled propensity kernels
        max_events (int, optional): Cap on state changes per trial
        config (SimulationConfig, optional): Run parameters. When given, the other
            run-parameter keywords must be left at their defaults.

    Returns:
        SamplePath for a single trial, Ensemble otherwise
    """
    if config is not None:
        given = [name for name, value, default in (
            ("algorithm", algorithm, "direct"), ("rates_cache", rates_cache, "rates"),
            ("ntrials", ntrials, 1), ("use_numba", use_numba, False),
        ) if value != default]
        given += [name for name, value in (
            ("tfinal", tfinal), ("save_points", save_points), ("seed", seed),
            ("max_events", max_events),
        ) if value is not None]
        if given:
            raise ValueError(f"Pass either config or run parameters, not both (got {', '.join(given)})")
    else:
        if tfinal is None:
            raise ValueError("tfinal is required")
        config = SimulationConfig(tfinal=tfinal, algorithm=algorithm, save_points=save_points,
                                  rates_cache=rates_cache, ntrials=ntrials, seed=seed,
                                  use_numba=use_numba, max_events=max_events)

    compiled = as_model(model)
    solver = get_algorithm(config.algorithm, config.rates_cache)
    points = config.save_point_array()
    streams = np.random.SeedSequence(config.seed).spawn(config.ntrials)

    logger.info("Simulating '%s' with %r: %d trial(s) to t=%g",
                compiled.name, solver, config.ntrials, config.tfinal)
    paths = []
    for trial, stream in enumerate(streams):
        path = simulate_path(compiled, solver, config.tfinal, np.random.default_rng(stream),
                             save_points=points, use_numba=config.use_numba,
                             max_events=config.max_events)
        logger.debug("Trial %d finished: %d events in %d steps", trial, path.reaction_count, path.steps)
        paths.append(path)

    if config.ntrials == 1:
        return paths[0]
    return Ensemble(paths)


def final_state_stats(ensemble: Ensemble) -> pd.DataFrame:
    """Mean and variance of each species over the final states of an ensemble."""
    finals = np.stack([p.final_state for p in ensemble])
    return pd.DataFrame({
        "Species": list(ensemble.species_names),
        "Mean": finals.mean(axis=0),
        "Variance": finals.var(axis=0, ddof=1) if len(ensemble) > 1 else np.zeros(finals.shape[1]),
    })


def run_simulation(model, tfinal: float, algorithm="direct", ntrials: int = 1,
                   seed: Optional[int] = None, plot: bool = True, **kwargs):
    """
    Run a simulation, report timing and statistics, and optionally plot it.

    For a single trial the statistics are time averages along the path; for
    an ensemble they are taken over the final states.

    Args:
        model: The network to simulate
        tfinal (float): Final simulation time
        algorithm: Algorithm selector passed to `simulate`
        ntrials (int): Number of trials
        seed (int, optional): Random seed for reproducibility
        plot (bool): Whether to plot the results
        **kwargs: Further arguments for `simulate`

    Returns:
        dict: 'result', 'stats_df' and 'elapsed_ms'
    """
    name = getattr(model, "name", "model")
    print(f"Running {algorithm} simulation of '{name}' to t={tfinal:g} ({ntrials:,} trial(s))...")
    start_time = time.time()
    result = simulate(model, algorithm=algorithm, tfinal=tfinal, ntrials=ntrials, seed=seed, **kwargs)
    elapsed_ms = (time.time() - start_time) * 1000
    print(f"Simulation completed in {elapsed_ms:.2f} ms")

    if isinstance(result, SamplePath):
        stats_df = result.time_average()
        print("\nTime-averaged statistics:")
    else:
        stats_df = final_state_stats(result)
        print("\nFinal-state statistics:")
    print(tabulate(stats_df, headers="keys", showindex=False, tablefmt="psql"))

    if plot:
        from ..visualization.plotting import plot_simulation_results

        plot_simulation_results(result, title=f"Stochastic simulation: {name}")

    return {
        'result': result,
        'stats_df': stats_df,
        'elapsed_ms': elapsed_ms,
    }
