"""
Main CLI entry point for ClickPredictor
"""

import click

from .. import __version__
from .predict import predict_command, batch_command, cpc_command


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    ClickPredictor - Landing page click prediction and waste attribution

    Predict where paid clicks land on a page, how many are wasted on
    elements that don't convert, and what that waste costs.
    """
    pass


# Register commands
cli.add_command(predict_command)
cli.add_command(batch_command)
cli.add_command(cpc_command)


if __name__ == '__main__':
    cli()
