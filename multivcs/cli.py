#!/usr/bin/env python3

import click

from multivcs import __version__
from multivcs.cli_utils import explicit_values, repeatable_option, standard_command
from multivcs.config import build_options, configure_logging, load_config
from multivcs.domain.checkout import Action
from multivcs.exit_codes import CONFIG_ERROR, INTERRUPTED, SUCCESS, UnknownActionError
from multivcs.services import CheckoutService, ProcessService


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.argument('action')
@click.option('--home', default=None, help='Home directory, used to expand "~" (default: your home)')
@click.option('--checkouts', 'checkouts_file', default=None,
              help='Checkout-list file (default: ~/.mvc-checkouts; /dev/null to read none)')
@click.option('--redo-existing/--no-redo-existing', default=False,
              help='Clone even if the directory already exists')
@click.option('--timeout', type=int, default=None, help='Seconds allowed for each command (default: 600)')
@click.option('--search/--no-search', default=False,
              help='Also search for checkouts under the --dir directories')
@click.option('--search-prefix/--no-search-prefix', default=False,
              help='Also use sibling directories whose names extend a listed directory')
@repeatable_option('--dir', 'search_dirs', help='Directory to search for checkouts (default: home)')
@repeatable_option('--ignore-dir', 'ignore_dirs', help='Directory not to search (may start with ~/)')
@click.option('--cvs-executable', default=None, help='Path to the cvs program')
@click.option('--git-executable', default=None, help='Path to the git program')
@click.option('--hg-executable', default=None, help='Path to the hg program')
@click.option('--svn-executable', default=None, help='Path to the svn program')
@click.option('--insecure/--no-insecure', default=False, help='Pass --insecure to hg')
@repeatable_option('--cvs-arg', 'cvs_args', help='Extra argument for every cvs command')
@repeatable_option('--git-arg', 'git_args', help='Extra argument for every git command')
@repeatable_option('--hg-arg', 'hg_args', help='Extra argument for every hg command')
@repeatable_option('--svn-arg', 'svn_args', help='Extra argument for every svn command')
@click.option('--show/--no-show', default=False, help='Print each command before running it')
@click.option('--print-directory', is_flag=True, help='Print each checkout directory before its commands')
@click.option('--dry-run/--no-dry-run', default=False, help='Print commands but do not run them')
@click.option('-q', '--quiet/--no-quiet', default=True, help='Do not report skipped checkouts')
@click.option('--debug', is_flag=True, help='Print debugging output')
@click.option('--debug-replacers', is_flag=True, help='Print output before and after every replacer')
@click.option('--debug-process-output', is_flag=True, help='Print output before and after replacing')
@click.option('--table', is_flag=True, help='With list, show checkouts as a table')
@click.version_option(version=__version__, prog_name='mvc')
@click.pass_context
@standard_command
def cli(ctx, action, table, **kwargs):
    """mvc - run a version control action on many checkouts at once.

    ACTION is one of clone (or checkout), status, pull (or update) and
    list; any unambiguous prefix works. Checkouts come from the
    checkout-list file and, with --search, from the directories named
    by --dir.

    \b
    Examples:
        mvc status
        mvc pull --search --dir ~/research
        mvc clone --no-dry-run
    """
    parsed = Action.parse(action)
    if parsed is None:
        raise UnknownActionError(action)

    config = load_config()
    configure_logging(config, kwargs.get('debug', False))
    options = build_options(parsed, config, **explicit_values(ctx, kwargs))

    checkouts = CheckoutService(options).collect()
    service = ProcessService(options)
    if options.action is Action.LIST:
        service.list_checkouts(checkouts, table=table)
    else:
        service.process(checkouts)


def main(argv=None):
    """Entry point; returns the process exit code."""
    try:
        cli.main(args=argv, prog_name='mvc', standalone_mode=False)
    except click.exceptions.Abort:
        return INTERRUPTED
    except click.ClickException as e:
        e.show()
        return CONFIG_ERROR
    except SystemExit as e:
        if e.code is None:
            return SUCCESS
        return e.code if isinstance(e.code, int) else CONFIG_ERROR
    return SUCCESS


if __name__ == '__main__':
    raise SystemExit(main())
