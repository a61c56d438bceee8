import click
from loguru import logger

from .util import (
    AdvancedHelpCommand,
    measure_memory_usage_and_time,
    transform_fraction,
    transform_threads,
    write_logfile,
)
from .._config import CLASSIFIERS, RunnerIOConfig
from ..scoring.runner import RedeemRunner


# Semi-supervised rescoring of PSMs
@click.command(name="score", cls=AdvancedHelpCommand)
# File handling
@click.option(
    "--in",
    "infile",
    required=True,
    type=click.Path(exists=True),
    help="PSM input table. Valid formats are .tsv and .parquet.",
)
@click.option(
    "--out",
    "outfile",
    type=click.Path(exists=False),
    help="Output prefix file. Results are written next to it as <prefix>_scored.tsv (or .parquet), "
    "<prefix>_summary_stat.csv and the trained model or weights.",
)
# Input table layout
@click.option(
    "--label_column",
    default="label",
    show_default=True,
    type=str,
    help="Column with 1 (target) and -1 (decoy) labels.",
)
@click.option(
    "--decoy_column",
    default=None,
    type=str,
    help="Boolean decoy column used instead of --label_column (True means decoy).",
)
@click.option(
    "--id_columns",
    default=None,
    type=str,
    help="Comma-separated identifier columns that are never used as features.",
)
@click.option(
    "--score_filter",
    default=None,
    type=str,
    help="Comma-separated feature columns to use. Defaults to every numeric column.",
)
# Semi-supervised learning
@click.option(
    "--classifier",
    default="XGBoost",
    show_default=True,
    type=click.Choice(CLASSIFIERS),
    help='Either a "LDA", "SVM", "XGBoost" or "HistGradientBoosting" classifier is used for semi-supervised learning.',
)
@click.option(
    "--xeval_num_iter",
    default=3,
    show_default=True,
    type=click.IntRange(min=2),
    help="Number of cross-validation folds.",
)
@click.option(
    "--train_fdr",
    default=0.01,
    show_default=True,
    type=float,
    help="FDR threshold used to select the initial feature and to relabel PSMs after each fold.",
    callback=transform_fraction,
)
@click.option(
    "--threshold",
    default=0.5,
    show_default=True,
    type=click.FloatRange(0, 1),
    help="Score threshold at which the classifier calls a PSM a target.",
    hidden=True,
)
@click.option(
    "--ss_scale_features/--no-ss_scale_features",
    default=False,
    show_default=True,
    help="Standardize features before semi-supervised learning.",
)
# Processing
@click.option(
    "--seed",
    default=None,
    type=int,
    help="Seed for shuffling PSMs into cross-validation folds.",
)
@click.option(
    "--threads",
    default=1,
    show_default=True,
    type=int,
    help="Number of threads used by the classifier. -1 means all available CPUs.",
    callback=transform_threads,
)
@click.option(
    "--test/--no-test",
    default=False,
    show_default=True,
    help="Run in test mode with fixed seed.",
    hidden=True,
)
@click.pass_context
@measure_memory_usage_and_time
@logger.catch(reraise=True)
def score(
    ctx,
    infile,
    outfile,
    label_column,
    decoy_column,
    id_columns,
    score_filter,
    classifier,
    xeval_num_iter,
    train_fdr,
    threshold,
    ss_scale_features,
    seed,
    threads,
    test,
):
    """
    Conduct semi-supervised rescoring of peptide-spectrum matches.
    """

    if outfile is None:
        outfile = infile

    config = RunnerIOConfig.from_cli_args(
        infile,
        outfile,
        "score_learn",
        classifier,
        xeval_num_iter,
        train_fdr,
        threshold,
        label_column,
        decoy_column,
        id_columns,
        score_filter,
        ss_scale_features,
        seed,
        threads,
        test,
    )

    sink_id = write_logfile(
        ctx.obj["LOG_LEVEL"],
        config.extra_writes["log_path"],
        ctx.obj["LOG_HEADER"],
    )
    try:
        logger.debug(config)
        logger.info(f"Conducting semi-supervised rescoring with {classifier}.")
        RedeemRunner(config).run()
    finally:
        logger.remove(sink_id)
