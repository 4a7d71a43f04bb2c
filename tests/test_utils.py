"""Tests for post-processing utilities and the command line driver."""

import meshio
import numpy as np
import pytest

from fem1d import FEMSolver, convergence_study
from fem1d.main import main
from fem1d.utils import (
    compute_exact_solution_at_nodes,
    default_output_name,
    linear_solve_stats,
    plot_solution,
    write_vtk,
)


class TestConvergenceStudy:
    """Test the convergence study helper."""

    def test_results(self, dirichlet_config, capsys):
        results = convergence_study(dirichlet_config, [2, 4, 8, 16], order=1)
        assert len(results["l2_errors"]) == 4
        assert len(results["l2_rates"]) == 3
        assert np.allclose(results["h_values"], [0.05, 0.025, 0.0125, 0.00625])
        assert all(np.diff(results["l2_errors"]) < 0)
        assert np.mean(results["l2_rates"]) > 1.8
        assert "Convergence Rates" in capsys.readouterr().out

    def test_round_off_rates_not_reported(self, dirichlet_config, capsys):
        """Cubic elements reproduce the solution, so there is no rate to measure."""
        results = convergence_study(dirichlet_config, [2, 4, 8], order=3)
        assert all(e < 1e-12 for e in results["l2_errors"])
        assert all(np.isnan(rate) for rate in results["l2_rates"])
        out = capsys.readouterr().out
        assert "Average: L2 rate = n/a" in out

    def test_plot(self, dirichlet_config, tmp_path):
        path = tmp_path / "convergence.png"
        convergence_study(dirichlet_config, [2, 4], order=1, plot_path=str(path))
        assert path.exists()


class TestOutput:
    """Test plots, VTK files and system statistics."""

    @pytest.fixture
    def solved(self, dirichlet_config):
        solver = FEMSolver.uniform(dirichlet_config, 3, order=2)
        solver.solve()
        return solver

    def test_exact_at_nodes(self, solved):
        values = compute_exact_solution_at_nodes(solved.mesh, solved.exact_solution)
        assert values.shape == (solved.mesh.num_nodes,)
        assert np.isclose(values[-1], 0.001)

    def test_write_vtk(self, solved, tmp_path):
        path = tmp_path / "out" / default_output_name(2, 1)
        write_vtk(solved.mesh, solved.solution, str(path))
        assert path.name == "solution_order2_problem1.vtk"

        data = meshio.read(str(path))
        assert data.points.shape == (solved.mesh.num_nodes, 3)
        assert np.allclose(data.point_data["u"], solved.solution)

    def test_plot_solution(self, solved, tmp_path):
        path = tmp_path / "solution.png"
        plot_solution(solved, str(path))
        assert path.exists()

    def test_plot_requires_solution(self, dirichlet_config):
        with pytest.raises(ValueError):
            plot_solution(FEMSolver.uniform(dirichlet_config, 2))

    def test_mesh_plot(self, solved, tmp_path):
        path = tmp_path / "mesh.png"
        solved.mesh.plot(solved.solution, path=str(path))
        assert path.exists()

    def test_linear_solve_stats(self, solved):
        stats = linear_solve_stats(*solved.apply_boundary_conditions(*solved.assemble()))
        assert stats["matrix_size"] == solved.num_dofs
        assert stats["symmetric"]
        assert np.isfinite(stats["condition_number"])
        assert 0.0 < stats["sparsity_ratio"] < 1.0


class TestCommandLine:
    """Smoke tests of the command line driver."""

    def test_single_run(self, capsys):
        assert main(["--order", "2", "--problem", "1", "--elements", "4"]) == 0
        out = capsys.readouterr().out
        assert "Number of active elems:       4" in out
        assert "Number of degrees of freedom: 9" in out
        assert "L2 norm of error" in out

    def test_invalid_problem_exits(self):
        with pytest.raises(SystemExit) as excinfo:
            main(["--problem", "3"])
        assert excinfo.value.code == 2

    def test_outputs(self, tmp_path):
        main(["--problem", "2", "--elements", "3", "--vtk", "--plot", "--output-dir", str(tmp_path)])
        assert (tmp_path / "solution_order1_problem2.vtk").exists()
        assert (tmp_path / "solution_order1_problem2.png").exists()

    def test_overrides_and_stats(self, capsys):
        main(["--elements", "2", "--g2", "0.002", "--length", "0.2", "--stats"])
        out = capsys.readouterr().out
        assert "condition_number" in out

    def test_convergence(self, capsys):
        main(["--convergence", "2", "4", "8"])
        assert "Average: L2 rate" in capsys.readouterr().out
