"""Tests for the ``pcaviz-reduce`` command line."""

import numpy as np
import pytest
import yaml

from pcaviz.cli import (
    EXIT_FILE_ERROR,
    EXIT_INVALID_INPUT,
    EXIT_NUMERICAL_FAILURE,
    EXIT_OK,
    main,
)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _run(csv_path, output, *extra):
    return main(["--input", str(csv_path), "--output", str(output), "--run-id", "cli", *extra])


class TestMain:
    def test_successful_run(self, workdir, labeled_csv, capsys):
        assert _run(labeled_csv, workdir / "out") == EXIT_OK

        out = capsys.readouterr().out
        assert "PCA completed successfully. Results saved to" in out
        assert (workdir / "out" / "cli" / "pca_results.png").exists()
        assert (workdir / "out" / "cli" / "pca_model.npz").exists()

    def test_three_components_without_plot(self, workdir, labeled_csv, capsys):
        assert _run(labeled_csv, workdir / "out", "--n-components", "3") == EXIT_OK

        assert "PCA completed successfully" not in capsys.readouterr().out
        assert np.load(workdir / "out" / "cli" / "embedding.npy").shape == (30, 3)

    def test_missing_input(self, workdir):
        assert _run(workdir / "absent.csv", workdir / "out") == EXIT_FILE_ERROR

    def test_existing_run_directory(self, workdir, labeled_csv):
        assert _run(labeled_csv, workdir / "out") == EXIT_OK
        assert _run(labeled_csv, workdir / "out") == EXIT_FILE_ERROR
        assert _run(labeled_csv, workdir / "out", "--overwrite") == EXIT_OK

    def test_malformed_csv(self, workdir, write_csv):
        path = write_csv("a,b,y\n1,2,0\n3,x,1\n")
        assert _run(path, workdir / "out") == EXIT_INVALID_INPUT

    def test_component_count_out_of_range(self, workdir, labeled_csv):
        assert _run(labeled_csv, workdir / "out", "--n-components", "9") == EXIT_INVALID_INPUT

    def test_rank_deficient_input(self, workdir, write_csv):
        path = write_csv("a,b,y\n1,1,0\n1,1,1\n1,1,0\n")
        assert _run(path, workdir / "out") == EXIT_NUMERICAL_FAILURE

    def test_bad_method_param(self, workdir, labeled_csv, capsys):
        assert _run(labeled_csv, workdir / "out", "--method-param", "rtol") == EXIT_INVALID_INPUT
        assert "KEY=VALUE" in capsys.readouterr().err

    def test_method_param_is_forwarded(self, workdir, labeled_csv):
        code = _run(labeled_csv, workdir / "out", "--n-components", "4", "--method-param", "rtol=0.5")
        assert code == EXIT_NUMERICAL_FAILURE

    @pytest.mark.parametrize("param", ["rtl=0.5", "rtol=abc", "rtol=-1"])
    def test_rejected_method_params(self, workdir, labeled_csv, param):
        assert _run(labeled_csv, workdir / "out", "--method-param", param) == EXIT_INVALID_INPUT
        assert not (workdir / "out" / "cli").exists()

    def test_retry_after_numerical_failure(self, workdir, write_csv):
        path = write_csv("a,b,y\n1,2,0\n2,4,1\n3,6,0\n4,8,1\n")
        assert _run(path, workdir / "out") == EXIT_NUMERICAL_FAILURE
        assert not (workdir / "out" / "cli").exists()

        assert _run(path, workdir / "out", "--n-components", "1") == EXIT_OK
        assert np.load(workdir / "out" / "cli" / "embedding.npy").shape == (4, 1)

    def test_missing_config(self, workdir, labeled_csv):
        code = _run(labeled_csv, workdir / "out", "--config", str(workdir / "none.yaml"))
        assert code == EXIT_FILE_ERROR

    def test_invalid_config(self, workdir, labeled_csv, capsys):
        config = workdir / "bad.yaml"
        config.write_text(yaml.safe_dump({"reduction": {"n_components": "two"}}), encoding="utf-8")

        assert _run(labeled_csv, workdir / "out", "--config", str(config)) == EXIT_INVALID_INPUT
        assert "Invalid configuration" in capsys.readouterr().err

    def test_config_file_supplies_defaults(self, workdir, labeled_csv):
        config = workdir / "run.yaml"
        config.write_text(
            yaml.safe_dump(
                {
                    "input": {"path": str(labeled_csv)},
                    "output": {"root": str(workdir / "from-config"), "run_id": "cfg"},
                    "plot": {"margin": 0.0},
                }
            ),
            encoding="utf-8",
        )

        assert main(["--config", str(config)]) == EXIT_OK
        assert (workdir / "from-config" / "cfg" / "embedding.csv").exists()

    def test_no_target_and_saved_model(self, workdir, labeled_csv, write_csv):
        assert _run(labeled_csv, workdir / "out") == EXIT_OK
        model = workdir / "out" / "cli" / "pca_model.npz"

        unlabeled = write_csv("a,b,c,d\n1,2,3,4\n0,1,0,1\n", name="unlabeled.csv")
        code = main(
            [
                "--input",
                str(unlabeled),
                "--output",
                str(workdir / "projected"),
                "--run-id",
                "reuse",
                "--no-target",
                "--model",
                str(model),
            ]
        )
        assert code == EXIT_OK
        assert np.load(workdir / "projected" / "reuse" / "embedding.npy").shape == (2, 2)
