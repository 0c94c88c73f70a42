"""
Tests for sample paths and ensembles.
"""

import pytest
import numpy as np
import pandas as pd

from pybiosim.output import Ensemble, SamplePath


def make_path(u, t=(0.0, 1.0, 3.0)):
    return SamplePath(np.array(t), np.array(u), ('A', 'B'), algorithm="direct")


class TestSamplePath:
    """Test indexing and evaluation of a single path."""

    def setup_method(self):
        self.path = make_path([[0, 5], [1, 4], [2, 3]])

    def test_shape_validation(self):
        with pytest.raises(ValueError):
            SamplePath([0.0, 1.0], [[0, 5]], ('A', 'B'))
        with pytest.raises(ValueError):
            SamplePath([0.0], [[0, 5]], ('A',))

    def test_indexing(self):
        np.testing.assert_array_equal(self.path[0], [0, 5])
        assert self.path[-1, 'B'] == 3
        np.testing.assert_array_equal(self.path[:, 'A'], [0, 1, 2])
        np.testing.assert_array_equal(self.path[1:, ['B', 'A']], [[4, 1], [3, 2]])
        np.testing.assert_array_equal(self.path[:, 0:1], [[0], [1], [2]])

    def test_unknown_species(self):
        with pytest.raises(KeyError, match="Unknown species 'C'"):
            self.path[:, 'C']
        with pytest.raises(KeyError):
            self.path.series(5)

    def test_too_many_indices(self):
        with pytest.raises(IndexError):
            self.path[0, 0, 0]

    def test_iteration(self):
        pairs = list(self.path)
        assert len(pairs) == len(self.path) == 3
        assert pairs[1][0] == 1.0
        np.testing.assert_array_equal(pairs[1][1], [1, 4])

    def test_properties(self):
        assert self.path.tfinal == 3.0
        np.testing.assert_array_equal(self.path.final_state, [2, 3])

    def test_at_is_right_continuous(self):
        np.testing.assert_array_equal(self.path.at(1.0), [1, 4])
        np.testing.assert_array_equal(self.path.at(0.999), [0, 5])
        np.testing.assert_array_equal(self.path.at([0.0, 2.0, 3.0]), [[0, 5], [1, 4], [2, 3]])

    def test_at_out_of_range(self):
        with pytest.raises(ValueError, match="Times must lie within"):
            self.path.at(3.5)

    def test_time_average(self):
        stats = self.path.time_average()
        assert list(stats['Species']) == ['A', 'B']
        # A holds 0 on [0, 1) and 1 on [1, 3)
        assert stats['Mean'][0] == pytest.approx(2.0 / 3.0)
        assert stats['Variance'][0] == pytest.approx(2.0 / 9.0)
        assert stats['Mean'][1] == pytest.approx(13.0 / 3.0)

    def test_to_dataframe(self):
        frame = self.path.to_dataframe()
        assert list(frame.columns) == ['time', 'A', 'B']
        assert frame['time'].tolist() == [0.0, 1.0, 3.0]

    def test_repr(self):
        assert "points=3" in repr(self.path)


class TestEnsemble:
    """Test Monte Carlo summaries over trials."""

    def setup_method(self):
        self.ensemble = Ensemble([
            make_path([[0, 5], [1, 4], [2, 3]]),
            make_path([[0, 5], [0, 5], [0, 5]]),
            make_path([[0, 5], [2, 3], [4, 1]]),
        ])

    def test_validation(self):
        with pytest.raises(ValueError, match="at least one"):
            Ensemble([])
        other = SamplePath([0.0], [[1]], ('C',))
        with pytest.raises(ValueError, match="same species"):
            Ensemble([self.ensemble[0], other])

    def test_sequence(self):
        assert len(self.ensemble) == 3
        assert isinstance(self.ensemble[0], SamplePath)
        sub = self.ensemble[:2]
        assert isinstance(sub, Ensemble)
        assert len(sub) == 2

    def test_mean_and_std(self):
        mean = self.ensemble.mean()
        assert mean.index.name == "time"
        assert mean['A'].tolist() == pytest.approx([0.0, 1.0, 2.0])
        assert mean['B'].tolist() == pytest.approx([5.0, 4.0, 3.0])
        std = self.ensemble.std()
        assert std['A'].tolist() == pytest.approx([0.0, 1.0, 2.0])

    def test_single_trial_std_is_zero(self):
        std = self.ensemble[:1].std()
        assert (std.to_numpy() == 0).all()

    def test_mean_at_times(self):
        mean = self.ensemble.mean([0.5, 2.0])
        assert mean['A'].tolist() == pytest.approx([0.0, 1.0])

    def test_unshared_save_points(self):
        ensemble = Ensemble([make_path([[0, 5], [1, 4], [2, 3]]),
                             make_path([[0, 5], [1, 4], [2, 3]], t=(0.0, 2.0, 3.0))])
        assert not ensemble.shares_save_points()
        with pytest.raises(ValueError, match="do not share save points"):
            ensemble.mean()
        assert ensemble.mean([1.5])['A'].tolist() == pytest.approx([0.5])

    def test_at(self):
        values = self.ensemble.at([1.0, 3.0])
        assert values.shape == (3, 2, 2)

    def test_summarize(self):
        table = self.ensemble.summarize()
        assert list(table.columns) == ['time', 'species', 'mean', 'std', 'min', 'max']
        assert len(table) == 6
        row = table[(table['time'] == 3.0) & (table['species'] == 'A')].iloc[0]
        assert row['min'] == 0
        assert row['max'] == 4

    def test_snapshot(self):
        snapshot = self.ensemble.snapshot(3.0)
        assert snapshot.index.name == "trial"
        assert snapshot['A'].tolist() == [2, 0, 4]

    def test_histogram(self):
        counts, edges = self.ensemble.histogram('A', 3.0)
        np.testing.assert_array_equal(edges, np.arange(-0.5, 5.0))
        np.testing.assert_array_equal(counts, [1, 0, 1, 0, 1])

    def test_extinction_probability(self):
        assert self.ensemble.extinction_probability('A', 3.0) == pytest.approx(1.0 / 3.0)
        assert self.ensemble.extinction_probability('B', 3.0) == 0.0

    def test_phase_portrait(self):
        x, y = self.ensemble.phase_portrait('A', 'B', trial=2)
        np.testing.assert_array_equal(x, [0, 2, 4])
        x, y = self.ensemble.phase_portrait('A', 'B')
        np.testing.assert_allclose(y, [5.0, 4.0, 3.0])

    def test_to_dataframe(self):
        frame = self.ensemble.to_dataframe()
        assert list(frame.columns) == ['trial', 'time', 'A', 'B']
        assert len(frame) == 9
        assert isinstance(frame, pd.DataFrame)
