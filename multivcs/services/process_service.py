"""
Processing service for multivcs.

Applies the run's action to every checkout in turn. Each checkout is
checked (does its directory exist, is its type supported) and then its
commands are run in order. Problems with one checkout are reported and
the loop moves on to the next.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import click

from ..dispatch import Dispatcher
from ..domain.checkout import Action, Checkout, RepoType
from ..domain.command import ExecutionResult
from ..domain.options import RunOptions
from ..exit_codes import ParentDirectoryUncreatable
from ..render import render_checkout_table
from .execution_service import ExecutionEngine

logger = logging.getLogger(__name__)


@dataclass
class ProcessSummary:
    """What happened to the checkouts of one run."""
    processed: int = 0
    skipped: int = 0
    results: List[ExecutionResult] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)


class ProcessService:
    """
    Service that applies one action to a collection of checkouts.

    Example:
        service = ProcessService(options)
        summary = service.process(checkouts)
        print(f"{summary.failed} commands failed")
    """

    def __init__(
        self,
        options: RunOptions,
        dispatcher: Optional[Dispatcher] = None,
        engine: Optional[ExecutionEngine] = None
    ):
        self.options = options
        self.dispatcher = dispatcher or Dispatcher(options)
        self.engine = engine or ExecutionEngine(options)

    def list_checkouts(self, checkouts: Iterable[Checkout], table: bool = False) -> None:
        """Print one descriptor per checkout, or a table of them."""
        if table:
            render_checkout_table(checkouts)
            return
        for checkout in checkouts:
            click.echo(str(checkout))

    def process(self, checkouts: Iterable[Checkout]) -> ProcessSummary:
        """
        Apply the run's action to each checkout, in order.

        Returns:
            ProcessSummary with one result per command that was run

        Raises:
            ParentDirectoryUncreatable: if a clone target's parent cannot be created
        """
        summary = ProcessSummary()
        for checkout in checkouts:
            results = self.process_checkout(checkout)
            if results is None:
                summary.skipped += 1
            else:
                summary.processed += 1
                summary.results.extend(results)
        logger.debug(f"processed {summary.processed}, skipped {summary.skipped}, "
                     f"failed commands {summary.failed}")
        return summary

    def process_checkout(self, checkout: Checkout) -> Optional[List[ExecutionResult]]:
        """
        Apply the run's action to one checkout.

        Returns:
            Results of the commands that were run, or None if the checkout
            was skipped
        """
        options = self.options
        directory = checkout.directory

        if checkout.repo_type is RepoType.BZR:
            click.echo(f"bzr handling not yet implemented: skipping {directory}")
            return None

        if checkout.parent is None:
            logger.error(f"Directory has no parent: {directory}")
            return None

        if options.action is Action.CLONE:
            if not self._prepare_clone(checkout):
                return None
        elif not os.path.isdir(directory):
            if not options.quiet:
                click.echo(f"Cannot find directory: {directory}")
            return None

        dispatch = self.dispatcher.dispatch(checkout)
        if dispatch is None:
            logger.debug(f"No commands for {options.action.value} on {checkout.repo_type.name}")
            return None

        if options.print_directory:
            click.echo(f"{directory} :")
        return [self.engine.run(command, dispatch.show_output) for command in dispatch.commands]

    def _prepare_clone(self, checkout: Checkout) -> bool:
        options = self.options
        directory = checkout.directory

        if checkout.repository is None:
            click.echo(f"Skipping checkout with unknown repository:\n  {directory}")
            return False

        if os.path.exists(directory) and not options.redo_existing:
            if not options.quiet:
                click.echo(f"Skipping checkout (dir already exists): {directory}")
            return False

        parent = checkout.parent
        if not os.path.isdir(parent):
            if options.show:
                if options.dry_run:
                    click.echo(f"  mkdir -p {parent}")
                else:
                    click.echo(f"Parent directory {parent} does not exist (creating)")
            if not options.dry_run:
                try:
                    os.makedirs(parent, exist_ok=True)
                except OSError as e:
                    raise ParentDirectoryUncreatable(parent) from e
        return True
