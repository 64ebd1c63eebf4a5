"""
Tests for the (action, repository type) dispatch table.
"""
import os

import pytest

from multivcs.dispatch import (
    BASE_RULES,
    COMMON_RULES,
    GIT_STATUS_RULES,
    HG_SHELVE_RULES,
    HG_STATUS_RULES,
    Dispatcher,
    is_legacy_certificate_host,
)
from multivcs.domain.checkout import Action, Checkout, RepoType
from multivcs.normalizer import normalize


def argvs(dispatch):
    return [c.argv for c in dispatch.commands]


class TestClone:

    def test_git(self, tmp_path, make_options):
        directory = str(tmp_path / "src" / "proj")
        checkout = Checkout(RepoType.GIT, directory, "https://example.org/proj.git")
        dispatch = Dispatcher(make_options(Action.CLONE)).dispatch(checkout)

        assert argvs(dispatch) == [
            ("git", "clone", "--recursive", "--", "https://example.org/proj.git", "proj"),
        ]
        assert dispatch.commands[0].cwd == str(tmp_path / "src")
        assert dispatch.commands[0].directory == directory

    def test_svn_without_module(self, tmp_path, make_options):
        checkout = Checkout(RepoType.SVN, str(tmp_path / "w"), "https://svn.example.org/repos/w")
        dispatch = Dispatcher(make_options(Action.CLONE)).dispatch(checkout)
        assert argvs(dispatch) == [("svn", "checkout", "https://svn.example.org/repos/w")]

    def test_cvs(self, tmp_path, make_options):
        checkout = Checkout(RepoType.CVS, str(tmp_path / "m"), ":pserver:h:/cvs", "proj/m")
        dispatch = Dispatcher(make_options(Action.CLONE)).dispatch(checkout)
        assert argvs(dispatch) == [("cvs", "-d", ":pserver:h:/cvs", "checkout", "-P", "-ko", "proj/m")]

    def test_hg_insecure_after_extra_args(self, tmp_path, make_options):
        options = make_options(
            Action.CLONE,
            insecure=True,
            extra_args={RepoType.HG: ("--noninteractive",)},
            executables={RepoType.HG: "/opt/hg"},
        )
        checkout = Checkout(RepoType.HG, str(tmp_path / "r"), "https://hg.example.org/r")
        dispatch = Dispatcher(options).dispatch(checkout)
        assert argvs(dispatch) == [
            ("/opt/hg", "clone", "https://hg.example.org/r", "r", "--noninteractive", "--insecure"),
        ]


class TestStatus:

    def test_git_commands(self, tmp_path, make_options):
        options = make_options(Action.STATUS, extra_args={RepoType.GIT: ("-c", "core.quotepath=off")})
        checkout = Checkout(RepoType.GIT, str(tmp_path / "proj"))
        dispatch = Dispatcher(options).dispatch(checkout)

        assert dispatch.show_output is True
        assert argvs(dispatch) == [
            ("git", "status", "-c", "core.quotepath=off", "--porcelain"),
            ("git", "log", "--branches", "--not", "--remotes", "-c", "core.quotepath=off"),
        ]
        assert all(c.cwd == checkout.directory for c in dispatch.commands)

    def test_rule_composition(self, tmp_path, make_options):
        checkout = Checkout(RepoType.GIT, str(tmp_path / "proj"))
        rules = Dispatcher(make_options()).dispatch(checkout).commands[0].rules
        assert rules == BASE_RULES[RepoType.GIT] + COMMON_RULES + GIT_STATUS_RULES

    def test_hg_shelve_has_own_rules(self, tmp_path, make_options):
        checkout = Checkout(RepoType.HG, str(tmp_path / "r"))
        dispatch = Dispatcher(make_options()).dispatch(checkout)
        assert argvs(dispatch) == [
            ("hg", "status"),
            ("hg", "outgoing", "-l", "1"),
            ("hg", "shelve", "-l"),
        ]
        assert dispatch.commands[1].rules[-len(HG_STATUS_RULES):] == HG_STATUS_RULES
        assert dispatch.commands[2].rules == HG_SHELVE_RULES

    def test_hg_legacy_certificate(self, make_checkout, make_options, write_hgrc):
        directory = make_checkout("r", RepoType.HG)
        write_hgrc(directory, "https://hg.codespot.com/p/r")
        dispatch = Dispatcher(make_options(insecure=True)).dispatch(Checkout(RepoType.HG, directory))
        assert argvs(dispatch)[1] == (
            "hg", "outgoing", "-l", "1", "--config", "web.cacerts=", "--insecure",
        )

    def test_cvs_and_svn(self, tmp_path, make_options):
        dispatcher = Dispatcher(make_options())
        cvs = Checkout(RepoType.CVS, str(tmp_path / "c"), ":pserver:h:/cvs", "c")
        svn = Checkout(RepoType.SVN, str(tmp_path / "s"), "https://h/r/s")
        assert argvs(dispatcher.dispatch(cvs)) == [("cvs", "-q", "diff", "-b", "--brief", "-N")]
        assert argvs(dispatcher.dispatch(svn)) == [("svn", "status")]


class TestPull:

    def test_git_fetch_has_no_extra_args(self, tmp_path, make_options):
        options = make_options(Action.PULL, extra_args={RepoType.GIT: ("--verbose",)})
        dispatch = Dispatcher(options).dispatch(Checkout(RepoType.GIT, str(tmp_path / "p")))
        assert dispatch.show_output is False
        assert argvs(dispatch) == [
            ("git", "pull", "-q", "--recurse-submodules", "--verbose"),
            ("git", "fetch", "-p"),
        ]

    def test_hg_and_svn_and_cvs(self, tmp_path, make_options):
        dispatcher = Dispatcher(make_options(Action.PULL))
        assert argvs(dispatcher.dispatch(Checkout(RepoType.HG, str(tmp_path / "h")))) == [
            ("hg", "-q", "update"),
            ("hg", "-q", "fetch"),
        ]
        assert argvs(dispatcher.dispatch(Checkout(RepoType.SVN, str(tmp_path / "s")))) == [
            ("svn", "-q", "update"),
        ]
        cvs = Checkout(RepoType.CVS, str(tmp_path / "c"), ":pserver:h:/cvs", "c")
        assert argvs(dispatcher.dispatch(cvs)) == [("cvs", "-Q", "update", "-d")]


class TestUnsupported:

    @pytest.mark.parametrize("action", [Action.CLONE, Action.STATUS, Action.PULL])
    def test_bzr(self, tmp_path, make_options, action):
        checkout = Checkout(RepoType.BZR, str(tmp_path / "b"))
        assert Dispatcher(make_options(action)).dispatch(checkout) is None

    def test_list(self, tmp_path, make_options):
        checkout = Checkout(RepoType.GIT, str(tmp_path / "g"))
        assert Dispatcher(make_options(Action.LIST)).dispatch(checkout) is None


class TestLegacyCertificateHost:

    @pytest.mark.parametrize("path,expected", [
        ("https://hg.codespot.com/p/proj", True),
        ("https://proj.name.googlecode.com/hg", True),
        ("https://proj.name.googlecode.com/hg/sub", False),
        ("https://hg.example.org/proj", False),
        (None, False),
    ])
    def test_hosts(self, path, expected):
        assert is_legacy_certificate_host(path) is expected


class TestRuleCatalogue:
    """The dispatched rules applied to typical tool output."""

    def rules(self, options, checkout, index=0):
        return Dispatcher(options).dispatch(checkout).commands[index].rules

    def test_git_porcelain_prefixed_with_directory(self, make_options):
        checkout = Checkout(RepoType.GIT, "/w/proj")
        output = " M file.txt\n?? new.txt\nA  added.txt\n"
        assert normalize(output, self.rules(make_options(), checkout), checkout.directory) == (
            " M /w/proj/file.txt\n?? /w/proj/new.txt\nA  /w/proj/added.txt\n"
        )

    def test_git_unpushed_commits(self, make_options):
        checkout = Checkout(RepoType.GIT, "/w/proj")
        output = "commit 0123abcd\nAuthor: someone\n\n    message\n"
        assert normalize(output, self.rules(make_options(), checkout, 1), checkout.directory) == (
            "unpushed commits: /w/proj\n"
        )

    def test_hg_outgoing_nothing(self, make_options):
        checkout = Checkout(RepoType.HG, "/w/r")
        output = "comparing with https://hg.example.org/r\nsearching for changes\nno changes found\n"
        assert normalize(output, self.rules(make_options(), checkout, 1), checkout.directory) == ""

    def test_hg_outgoing_changes(self, make_options):
        checkout = Checkout(RepoType.HG, "/w/r")
        output = ("comparing with https://hg.example.org/r\nsearching for changes\n"
                  "changeset:   3:abcdef\nuser:        someone\n")
        assert normalize(output, self.rules(make_options(), checkout, 1), checkout.directory) == (
            "unpushed changesets: /w/r\n"
        )

    def test_hg_shelve(self, make_options):
        checkout = Checkout(RepoType.HG, "/w/r")
        rules = self.rules(make_options(), checkout, 2)
        assert normalize("default         (2m ago)    wip\n", rules, "/w/r") == "shelved changes: /w/r\n"
        assert normalize("hg: unknown command 'shelve'\nsee 'hg help'\n", rules, "/w/r") == ""

    def test_svn_status(self, make_options):
        checkout = Checkout(RepoType.SVN, "/w/s")
        output = "M       src/a.c\n?       notes.txt\n"
        assert normalize(output, self.rules(make_options(), checkout), checkout.directory) == (
            "M     /w/s/src/a.c\n?     /w/s/notes.txt\n"
        )

    def test_x11_warning_removed(self, make_options):
        checkout = Checkout(RepoType.GIT, "/w/proj")
        output = (
            "Warning: untrusted X11 forwarding setup failed: xauth key data not generated\r\n"
            "Warning: No xauth data; using fake authentication data for X11 forwarding.\r\n"
        )
        rules = self.rules(make_options(Action.PULL), checkout)
        assert normalize(output, rules, checkout.directory) == ""

    def test_git_pull_up_to_date(self, make_options):
        checkout = Checkout(RepoType.GIT, "/w/proj")
        rules = self.rules(make_options(Action.PULL), checkout)
        assert normalize("Already up to date.\n", rules, checkout.directory) == ""

    def test_git_fatal_names_directory(self, make_options):
        checkout = Checkout(RepoType.GIT, "/w/proj")
        rules = self.rules(make_options(Action.PULL), checkout)
        assert normalize("fatal: not a git repository\n", rules, checkout.directory) == (
            "fatal in /w/proj: not a git repository\n"
        )


def test_hg_dispatch_reads_hgrc_only_when_present(tmp_path, make_options):
    checkout = Checkout(RepoType.HG, str(tmp_path / "missing"))
    dispatch = Dispatcher(make_options(Action.PULL)).dispatch(checkout)
    assert not os.path.exists(checkout.directory)
    assert argvs(dispatch)[1] == ("hg", "-q", "fetch")
