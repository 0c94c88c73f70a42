"""
Stochastic simulation of a gene-regulation network.

Walks through building the auto-regulatory gene network, sampling one
path and an ensemble, indexing into them, and summarizing the results.
"""

import logging

import matplotlib.pyplot as plt
import numpy as np

import pybiosim as bs
from pybiosim.simulation.ode import simulate_ode
from pybiosim.visualization.plotting import compare_ode_ensemble

logging.basicConfig(level=logging.INFO)

# 1. The model: a gene whose protein dimer represses its own transcription
network = bs.Network("auto-regulation")

network <= bs.Species("gene", 10)
network <= bs.Species("P2_gene", 0)
network <= bs.Species("mRNA", 0)
network <= bs.Species("P", 0)
network <= bs.Species("P2", 0)

network <= bs.Reaction("repression binding", 1.0, "gene + P2 --> P2_gene")
network <= bs.Reaction("reverse repression binding", 10.0, "P2_gene --> gene + P2")
network <= bs.Reaction("transcription", 0.01, "gene --> gene + mRNA")
network <= bs.Reaction("translation", 10.0, "mRNA --> mRNA + P")
network <= bs.Reaction("dimerization", 1.0, "P + P --> P2")
network <= bs.Reaction("dissociation", 1.0, "P2 --> P + P")
network <= bs.Reaction("mRNA degradation", 0.1, "mRNA --> 0")
network <= bs.Reaction("protein degradation", 0.01, "P --> 0")

print(network.summary())

# 2. One sample path with the direct method, saving every jump
path = bs.simulate(network, algorithm="direct", tfinal=500.0, seed=5357)
print(path)
print("state at the 100th jump:", path[100])
print("final P2 count:", path[-1, "P2"])
print("state at t=250:", path.at(250.0))
print(path.time_average())

bs.plot_sample_path(path, species_subset=["mRNA", "P", "P2"], title="One sample path")

# 3. An ensemble on a regular grid, using the pre-parsed model
model = network.compile()
grid = np.linspace(0.0, 500.0, 251)
ensemble = bs.simulate(model, algorithm="sorting_direct", tfinal=500.0, save_points=grid,
                       ntrials=100, seed=5357)

print(ensemble.summarize(times=[100.0, 250.0, 500.0]))
print("P(mRNA extinct at t=500):", ensemble.extinction_probability("mRNA", 500.0))

bs.plot_mean(ensemble, species_subset=["mRNA", "P2"], title="Ensemble mean")
bs.plot_histogram(ensemble, "P", 500.0, title="Protein at t=500")
bs.plot_phase_portrait(ensemble, "P", "P2", title="Mean phase portrait")

# 4. Compare with the deterministic reaction-rate equations
ode = simulate_ode(network, t_span=(0.0, 500.0), t_eval=grid)
compare_ode_ensemble(ode, ensemble, species_subset=["P", "P2"])

# 5. Tau-leaping trades exactness for speed on the same grid
leaped = bs.simulate(model, algorithm=bs.TauLeaping(epsilon=0.05), tfinal=500.0,
                     save_points=grid, ntrials=100, seed=5357)
print(leaped.mean(times=[500.0]))

# Long-form tables go straight into pandas
frame = ensemble.to_dataframe()
print(frame.groupby("time")[["mRNA", "P", "P2"]].mean().tail())

plt.show()
