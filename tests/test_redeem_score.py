import os

import numpy as np
import pandas as pd
import pytest
from click.testing import CliRunner

from redeem.main import cli


def _psm_table(n=200, seed=0):
    rng = np.random.default_rng(seed)
    label = np.where(np.arange(n) < n // 2, 1, -1)
    return pd.DataFrame(
        {
            "psm_id": ["psm_%d" % i for i in range(n)],
            "scan": np.arange(n),
            "label": label,
            "main_score": rng.normal(size=n) + np.where(label == 1, 3.0, 0.0),
            "delta_score": rng.normal(size=n) + np.where(label == 1, 1.0, 0.0),
            "noise": rng.normal(size=n),
        }
    )


def _run(args):
    runner = CliRunner()
    result = runner.invoke(cli, args, catch_exceptions=False)
    return result


def test_score_tsv_lda(tmpdir):
    os.chdir(tmpdir.strpath)
    table = _psm_table()
    table.to_csv("psms.tsv", sep="\t", index=False)

    result = _run(
        [
            "score",
            "--in", "psms.tsv",
            "--out", "result.tsv",
            "--classifier", "LDA",
            "--id_columns", "scan",
            "--test",
        ]
    )
    assert result.exit_code == 0

    scored = pd.read_csv("result_scored.tsv", sep="\t")
    assert len(scored) == len(table)
    assert list(scored.columns[:6]) == list(table.columns)
    assert "redeem_score" in scored.columns
    assert "redeem_q_value" in scored.columns
    assert scored["redeem_q_value"].between(0, 1).all()
    targets = scored["label"] == 1
    assert scored.loc[targets, "redeem_score"].mean() > scored.loc[~targets, "redeem_score"].mean()

    summary = pd.read_csv("result_summary_stat.csv")
    assert list(summary.columns) == ["qvalue", "targets", "decoys", "cutoff"]
    assert len(summary) == 5

    weights = pd.read_csv("result_weights.csv")
    assert sorted(weights["score"]) == ["delta_score", "main_score", "noise"]

    assert os.path.exists("result_redeem_score.log")


def test_score_tsv_xgboost_model(tmpdir):
    os.chdir(tmpdir.strpath)
    _psm_table().to_csv("psms.tsv", sep="\t", index=False)

    result = _run(
        [
            "score",
            "--in", "psms.tsv",
            "--classifier", "XGBoost",
            "--score_filter", "main_score,delta_score",
            "--xeval_num_iter", "2",
            "--test",
        ]
    )
    assert result.exit_code == 0
    assert os.path.exists("psms_scored.tsv")
    assert os.path.exists("psms_model.bin")
    assert not os.path.exists("psms_weights.csv")


def test_score_parquet(tmpdir):
    os.chdir(tmpdir.strpath)
    table = _psm_table().drop(columns=["label"])
    table["decoy"] = np.arange(len(table)) >= len(table) // 2
    table.to_parquet("psms.parquet")

    result = _run(
        [
            "score",
            "--in", "psms.parquet",
            "--out", "result.parquet",
            "--classifier", "LDA",
            "--decoy_column", "decoy",
            "--id_columns", "scan",
            "--ss_scale_features",
            "--seed", "3",
        ]
    )
    assert result.exit_code == 0

    scored = pd.read_parquet("result_scored.parquet")
    assert len(scored) == len(table)
    assert "redeem_q_value" in scored.columns


def test_score_missing_label_column(tmpdir):
    os.chdir(tmpdir.strpath)
    _psm_table().drop(columns=["label"]).to_csv("psms.tsv", sep="\t", index=False)

    runner = CliRunner()
    result = runner.invoke(cli, ["score", "--in", "psms.tsv", "--classifier", "LDA"])
    assert result.exit_code != 0
    assert not os.path.exists("psms_scored.tsv")


@pytest.mark.parametrize("option", [["--train_fdr", "0"], ["--xeval_num_iter", "1"]])
def test_score_rejects_bad_options(tmpdir, option):
    os.chdir(tmpdir.strpath)
    _psm_table().to_csv("psms.tsv", sep="\t", index=False)

    runner = CliRunner()
    result = runner.invoke(cli, ["score", "--in", "psms.tsv"] + option)
    assert result.exit_code == 2


def test_help():
    runner = CliRunner()
    result = runner.invoke(cli, ["score", "--help"])
    assert result.exit_code == 0
    assert "--classifier" in result.output
    assert "--threshold" not in result.output

    result = runner.invoke(cli, ["score", "--helphelp"])
    assert result.exit_code == 0
    assert "--threshold" in result.output
