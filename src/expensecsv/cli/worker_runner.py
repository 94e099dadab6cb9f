"""Run a worker operation from the CLI with a progress bar."""

import sys

import click

from expensecsv.config import WorkerConfig
from expensecsv.worker.host import CSVWorker
from expensecsv.worker.messages import PROGRESS


def run_in_worker(config: WorkerConfig, message: dict, label: str) -> dict:
    """Post one message to a fresh worker and wait for its terminal reply.

    Progress messages drive a click progress bar on stderr.

    Args:
        config: Worker configuration
        message: Inbound message dict
        label: Progress bar label

    Returns:
        The terminal message dict (a *_COMPLETE or ERROR message)
    """
    terminal = None
    with CSVWorker(config) as worker:
        worker.post_message(message)
        with click.progressbar(length=100, label=label, file=sys.stderr) as bar:
            shown = 0
            for outbound in worker.iter_messages():
                if outbound["type"] == PROGRESS:
                    bar.update(outbound["progress"] - shown)
                    shown = outbound["progress"]
                else:
                    terminal = outbound
    return terminal
