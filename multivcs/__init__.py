"""
multivcs - run one version control action over many checkouts.

multivcs (command ``mvc``) keeps a set of working copies, from CVS,
Subversion, Git, Mercurial and Bazaar, in step with one command. It can
clone them all, show which have uncommitted or unpushed changes, and
pull upstream changes into all of them. Output is rewritten so that
uninteresting chatter disappears and every remaining line names the
checkout it is about.

Quick Start:
    from multivcs import Action, CheckoutService, ProcessService, build_options

    options = build_options(Action.STATUS, search=True, search_dirs=["~/research"])
    checkouts = CheckoutService(options).collect()
    ProcessService(options).process(checkouts)

Checkout list (~/.mvc-checkouts):
    SVNROOT: svn+ssh://host/repos/
    ~/research/typequals/igj

    GITREPOS: https://example.org/proj.git
    ~/proj

Domain Objects:
    Checkout - A working copy and its upstream location
    Command - One subprocess invocation and its output rules
    RunOptions - Options for one run

Services:
    CheckoutService - Checkout list and filesystem search
    ProcessService - Applies an action to each checkout
    ExecutionEngine - Runs one command, normalizes its output
"""

__version__ = "1.0.0"

# Domain objects
from .domain import (
    Action,
    Checkout,
    CheckoutSet,
    Command,
    ExecutionResult,
    Outcome,
    RepoType,
    ReplacerRule,
    RunOptions,
)

# Services
from .services import (
    CheckoutService,
    ExecutionEngine,
    ProcessService,
)

# Configuration
from .config import build_options, load_config

__all__ = [
    # Version
    "__version__",
    # Domain objects
    "Action",
    "Checkout",
    "CheckoutSet",
    "Command",
    "ExecutionResult",
    "Outcome",
    "RepoType",
    "ReplacerRule",
    "RunOptions",
    # Services
    "CheckoutService",
    "ExecutionEngine",
    "ProcessService",
    # Configuration
    "build_options",
    "load_config",
]
