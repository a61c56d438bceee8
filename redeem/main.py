import click

from .cli.score import score as score_command
from .cli.util import GlobalLogLevelGroup


@click.group(chain=False, cls=GlobalLogLevelGroup)
@click.version_option(package_name="redeem")
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(
        ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"],
        case_sensitive=False,
    ),
    help="Set global logging level.",
)
@click.option(
    "--log-colorize/--no-log-colorize",
    default=True,
    help="Turn on/off colorized logging output.",
)
@click.pass_context
def cli(ctx, log_level, log_colorize):
    """
    redeem: Semi-supervised rescoring of peptide-spectrum matches.

    PSMs are relabeled by target-decoy competition and rescored by a classifier
    trained on cross-validation folds.
    """


# Semi-supervised rescoring of PSMs
cli.add_command(score_command, name="score")
