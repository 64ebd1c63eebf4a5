"""
Map (action, repository type) to the commands to run.

Each pair has one ActionPlan: a primary command, up to two secondary
commands that only add diagnostics, and the replacer rules for their
output. The rules a command sees are, in order, the rules for its
repository type, the rules common to every type, then the plan's own
rules (unless the command carries a private rule list).

Templates use these tokens:
    {repository}  the checkout's upstream reference
    {module}      the checkout's module (dropped when there is none)
    {basename}    the final component of the checkout directory
    {args}        where the per-program extra arguments go (default: at the end)
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .domain.checkout import Action, Checkout, RepoType
from .domain.command import Command, ReplacerRule as R
from .domain.options import RunOptions
from .identity import read_hg_default_path

logger = logging.getLogger(__name__)

ARGS = "{args}"

# Hg hosting whose certificates cannot be verified
LEGACY_CERT_PREFIX = "https://hg.codespot.com/"
LEGACY_CERT_PATTERN = re.compile(r"^https://[^.]*[.][^.]*[.]googlecode[.]com/hg$")
NO_CACERTS = ("--config", "web.cacerts=")


@dataclass(frozen=True)
class CommandTemplate:
    """One command of a plan, before it is bound to a checkout."""
    args: Tuple[str, ...]
    extra_args: bool = True
    insecure: bool = False
    legacy_cert_args: Optional[Tuple[str, ...]] = None
    rules: Optional[Tuple[R, ...]] = None


@dataclass(frozen=True)
class ActionPlan:
    """Everything needed to perform one action on one type of checkout."""
    commands: Tuple[CommandTemplate, ...]
    rules: Tuple[R, ...] = ()
    show_output: bool = False
    in_parent: bool = False


@dataclass(frozen=True)
class Dispatch:
    """Commands bound to a single checkout."""
    commands: Tuple[Command, ...]
    show_output: bool = False


# ---------------------------------------------------------------------------
# Rules applied for every action
# ---------------------------------------------------------------------------

HG_CERT_WARNING = R(
    r"(^|\n)warning: .* certificate not verified \(check web.cacerts config setting\)\n",
    r"\g<1>",
)

BASE_RULES: Dict[RepoType, Tuple[R, ...]] = {
    RepoType.BZR: (),
    RepoType.CVS: (
        R(r"(^|\n)([?]) ", r"\g<1>\g<2> {dir}/"),
    ),
    RepoType.GIT: (
        R(r"(^|\n)fatal:", r"\g<1>fatal in {dir}:"),
        R(r"(^|\n)warning:", r"\g<1>warning in {dir}:"),
        R(r"(^|\n)(There is no tracking information for the current branch\.)",
          r"\g<1>{dir}: \g<2>"),
        R(r"(^|\n)(Your configuration specifies to merge)", r"{dir}: \g<1>\g<2>"),
    ),
    RepoType.HG: (
        # "real URL" is for bitbucket.org; must come early
        R(r"(^|\n)real URL is .*\n", r"\g<1>"),
        R(r"(^|\n)(abort: .*)", r"\g<1>\g<2>: {dir}"),
        R(r"(^|\n)([MARC!?I]) ", r"\g<1>\g<2> {dir}/"),
        R(r"(^|\n)(\*\*\* failed to import extension .*: No module named demandload\n)",
          r"\g<1>"),
        # Matches can overlap, so the same warning is removed twice
        HG_CERT_WARNING,
        HG_CERT_WARNING,
        R(r"(^|\n)((comparing with default-push\n)?"
          r"abort: repository default(-push)? not found!: .*\n)", r"\g<1>"),
    ),
    RepoType.SVN: (
        R(r"(svn: Network connection closed unexpectedly)", r"\g<1> for {dir}"),
        R(r"(svn: Repository) (UUID)", r"\g<1> {dir} \g<2>"),
        R(r"(svn: E155037: Previous operation has not finished;"
          r" run 'cleanup' if it was interrupted)", r"\g<1>; for {dir}"),
    ),
}

COMMON_RULES: Tuple[R, ...] = (
    # Sometimes there are two carriage returns
    R(r"(remote: )?Warning: untrusted X11 forwarding setup failed:"
      r" xauth key data not generated\r*\n"
      r"(remote: )?Warning: No xauth data; using fake authentication data"
      r" for X11 forwarding\.\r*\n", ""),
    R(r"(working copy ')", r"\g<1>{dir}"),
)


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------

CVS_STATUS_RULES = (
    R(r"\n=+"
      r"\nRCS file: .*"
      r"(\nretrieving revision .*)?"
      r"\ndiff .*"
      r"(\nFiles .* and .* differ)?", ""),
    R(r"(^|\n)Index: ", r"\g<1>{dir}/"),
    R(r"(^|\n)(cvs \[diff aborted)(\]:)", r"\g<1>\g<2> in {dir}\g<3>"),
    R(r"(^|\n)(Permission denied)", r"\g<1>\g<2> in {dir}"),
    R(r"(^|\n)(cvs diff: )(cannot find revision control)", r"\g<1>\g<2> in {dir}: \g<3>"),
    R(r"(^|\n)(cvs diff: cannot find )", r"\g<1>\g<2>{dir}"),
    R(r"(^|\n)(cvs diff: in directory )", r"\g<1>\g<2>{dir}/"),
    R(r"(^|\n)(cvs diff: ignoring )", r"\g<1>\g<2>{dir}/"),
)

GIT_STATUS_RULES = (
    R(r"(^|\n)On branch master\nYour branch is up-to-date with 'origin/master'.\n\n?", r"\g<1>"),
    R(r"(^|\n)nothing to commit,? working directory clean\n", r"\g<1>"),
    R(r'(^|\n)no changes added to commit \(use "git add" and/or "git commit -a"\)\n', r"\g<1>"),
    R(r'(^|\n)nothing added to commit but untracked files present \(use "git add" to track\)\n',
      r"\g<1>"),
    R(r"(^|\n)nothing to commit \(use -u to show untracked files\)\n", r"\g<1>"),
    R(r"(^|\n)#\n", r"\g<1>"),
    R(r"(^|\n)# On branch master\n", r"\g<1>"),
    R(r"(^|\n)nothing to commit \(working directory clean\)\n", r"\g<1>"),
    R(r"(^|\n)# Changed but not updated:\n", r"\g<1>"),
    R(r'(^|\n)#   \(use "git add <file>..." to update what will be committed\)\n', r"\g<1>"),
    R(r'(^|\n)#   \(use "git checkout -- <file>..." to discard changes in working directory\)\n',
      r"\g<1>"),
    R(r"(^|\n)# Untracked files:\n", r"\g<1>"),
    R(r'(^|\n)#   \(use "git add <file>..." to include in what will be committed\)\n', r"\g<1>"),
    R(r"(^|\n)(#\tmodified:   )", r"\g<1>{dir}/"),
    # Matches a prefix of the previous rule, so must follow it
    R(r"(^|\n)(#\t)", r"\g<1>untracked: {dir}/"),
    R(r"(^|\n)# Your branch is ahead of .*\n", r"\g<1>unpushed changesets: {dir}\n"),
    R(r"(^|\n)([?][?]) ", r"\g<1>\g<2> {dir}/"),
    R(r"(^|\n)([ACDMRU][ ACDMRTU]|[ ACDMRU][ACDMRTU]) ", r"\g<1>\g<2> {dir}/"),
    R(r"(^|\n)# Your branch is behind .*\n", r"\g<1>unpushed changesets: {dir}\n"),
    # Output of "git log --branches --not --remotes"
    R(r"^commit .*(.*\n)+", r"unpushed commits: {dir}\n"),
)

HG_STATUS_RULES = (
    # The third line is either "no changes found" or "changeset"
    R(r"^comparing with .*\nsearching for changes\nchangeset[^\x01]*",
      r"unpushed changesets: {dir}\n"),
    R(r"^\n?comparing with .*\nsearching for changes\nno changes found\n", ""),
)

# Shelve is an optional extension; say nothing if it is not installed
HG_SHELVE_RULES = (
    R(r"^hg: unknown command 'shelve'\n(.*\n)+", ""),
    R(r"^(.*\n)+", r"shelved changes: {dir}\n"),
)

PLANS: Dict[Tuple[Action, RepoType], ActionPlan] = {
    # clone: run in the parent directory
    (Action.CLONE, RepoType.CVS): ActionPlan(
        commands=(CommandTemplate(("-d", "{repository}", "checkout", "-P", "-ko", "{module}")),),
        in_parent=True,
    ),
    (Action.CLONE, RepoType.GIT): ActionPlan(
        # "--" keeps a directory starting with "-" from being read as an option
        commands=(CommandTemplate(("clone", "--recursive", "--", "{repository}", "{basename}")),),
        in_parent=True,
    ),
    (Action.CLONE, RepoType.HG): ActionPlan(
        commands=(CommandTemplate(("clone", "{repository}", "{basename}"), insecure=True),),
        in_parent=True,
    ),
    (Action.CLONE, RepoType.SVN): ActionPlan(
        commands=(CommandTemplate(("checkout", "{repository}", "{module}")),),
        in_parent=True,
    ),

    # status: output is the point, so always shown
    (Action.STATUS, RepoType.CVS): ActionPlan(
        # No "-d ROOT": it breaks subdirectories from a different repository
        commands=(CommandTemplate(("-q", "diff", "-b", "--brief", "-N")),),
        rules=CVS_STATUS_RULES,
        show_output=True,
    ),
    (Action.STATUS, RepoType.GIT): ActionPlan(
        commands=(
            CommandTemplate(("status", ARGS, "--porcelain")),
            # --porcelain does not report commits that are not pushed
            CommandTemplate(("log", "--branches", "--not", "--remotes")),
        ),
        rules=GIT_STATUS_RULES,
        show_output=True,
    ),
    (Action.STATUS, RepoType.HG): ActionPlan(
        commands=(
            CommandTemplate(("status",)),
            CommandTemplate(("outgoing", "-l", "1"), insecure=True,
                            legacy_cert_args=("outgoing", "-l", "1") + NO_CACERTS),
            CommandTemplate(("shelve", "-l"), rules=HG_SHELVE_RULES),
        ),
        rules=HG_STATUS_RULES,
        show_output=True,
    ),
    (Action.STATUS, RepoType.SVN): ActionPlan(
        commands=(CommandTemplate(("status",)),),
        # "svn status --show-updates" would add an eighth column
        rules=(R(r"(^|\n)([ACDIMRX?!~ ][CM ][L ][+ ][$ ]) *", r"\g<1>\g<2> {dir}/"),),
        show_output=True,
    ),

    # pull
    (Action.PULL, RepoType.CVS): ActionPlan(
        # No "-d ROOT": it breaks checkouts embedded in other checkouts
        commands=(CommandTemplate(("-Q", "update", "-d")),),
        rules=(
            R(r"(^|\n)(cvs update: ((in|skipping) directory|conflicts found in )) +",
              r"\g<1>\g<2> {dir}/"),
            R(r"(^|\n)(Merging differences between 1.16 and 1.17 into )", r"\g<1>\g<2> {dir}/"),
            R(r"(cvs update: move away )", r"\g<1>{dir}/"),
            R(r"(cvs \[update aborted)(\])", r"\g<1> in {dir}\g<2>"),
        ),
    ),
    (Action.PULL, RepoType.GIT): ActionPlan(
        commands=(
            CommandTemplate(("pull", "-q", "--recurse-submodules")),
            # Prune branches deleted upstream
            CommandTemplate(("fetch", "-p"), extra_args=False),
        ),
        rules=(
            R(r"(^|\n)Already up[- ]to[- ]date\.\n", r"\g<1>"),
            R(r"(^|\n)error:", r"\g<1>error in {dir}:"),
            R(r"(^|\n)Please, commit your changes or stash them before you can merge.\n"
              r"Aborting\n", r"\g<1>"),
            R(r"((^|\n)CONFLICT \(content\): Merge conflict in )", r"\g<1>{dir}/"),
            R(r"(^|\n)([ACDMRU]\t)", r"\g<1>\g<2>{dir}/"),
        ),
    ),
    (Action.PULL, RepoType.HG): ActionPlan(
        commands=(
            CommandTemplate(("-q", "update")),
            CommandTemplate(("-q", "fetch"), insecure=True,
                            legacy_cert_args=("-q", "fetch") + NO_CACERTS),
        ),
        rules=(
            R(r"(^|\n)([?!AMR] ) +", r"\g<1>\g<2> {dir}/"),
            R(r"(^|\n)abort: ", r"\g<1>"),
        ),
    ),
    (Action.PULL, RepoType.SVN): ActionPlan(
        commands=(CommandTemplate(("-q", "update")),),
        rules=(
            R(r"(^|\n)([?!AMR] ) +", r"\g<1>\g<2> {dir}/"),
            R(r"(svn: Failed to add file ')(.*')", r"\g<1>{dir}/\g<2>"),
        ),
    ),
}


def is_legacy_certificate_host(default_path: Optional[str]) -> bool:
    """True if an Hg default path is on hosting with unverifiable certificates."""
    if default_path is None:
        return False
    return (default_path.startswith(LEGACY_CERT_PREFIX)
            or LEGACY_CERT_PATTERN.match(default_path) is not None)


class Dispatcher:
    """
    Builds the commands for one checkout from the plan table.

    Example:
        dispatcher = Dispatcher(options)
        dispatch = dispatcher.dispatch(checkout)
        if dispatch is None:
            ...  # nothing is known about this action for this type
    """

    def __init__(self, options: RunOptions):
        self.options = options

    def plan_for(self, repo_type: RepoType) -> Optional[ActionPlan]:
        return PLANS.get((self.options.action, repo_type))

    def dispatch(self, checkout: Checkout) -> Optional[Dispatch]:
        """
        Bind the plan for the run's action to ``checkout``.

        Returns:
            The commands to run, or None if the action is not supported for
            the checkout's repository type.
        """
        plan = self.plan_for(checkout.repo_type)
        if plan is None:
            return None

        rules = BASE_RULES[checkout.repo_type] + COMMON_RULES + plan.rules
        cwd = (checkout.parent or checkout.directory) if plan.in_parent else checkout.directory
        legacy = checkout.repo_type is RepoType.HG and self._legacy_certificate(checkout)

        commands = tuple(
            Command(
                argv=self._argv(template, checkout, legacy),
                cwd=cwd,
                directory=checkout.directory,
                rules=template.rules if template.rules is not None else rules,
            )
            for template in plan.commands
        )
        return Dispatch(commands, plan.show_output)

    def _legacy_certificate(self, checkout: Checkout) -> bool:
        default_path = read_hg_default_path(os.path.join(checkout.directory, RepoType.HG.marker))
        legacy = is_legacy_certificate_host(default_path)
        logger.debug(f"defaultPath={default_path} for {checkout.directory}; legacy certificate: {legacy}")
        return legacy

    def _argv(self, template: CommandTemplate, checkout: Checkout, legacy: bool) -> Tuple[str, ...]:
        repo_type = checkout.repo_type
        args = template.args
        if legacy and template.legacy_cert_args is not None:
            args = template.legacy_cert_args
        extra = self.options.args_for(repo_type) if template.extra_args else ()
        values = {
            "{repository}": checkout.repository,
            "{module}": checkout.module,
            "{basename}": checkout.name,
        }

        argv = [self.options.executable(repo_type)]
        for token in args:
            if token == ARGS:
                argv.extend(extra)
            elif token in values:
                if values[token] is not None:
                    argv.append(values[token])
            else:
                argv.append(token)
        if ARGS not in args:
            argv.extend(extra)
        if template.insecure and self.options.insecure:
            argv.append("--insecure")
        return tuple(argv)
