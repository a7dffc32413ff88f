"""Tests for shell parsing, segmentation and wrapper resolution.

Covers:

1. **Operators** -- ``&&``, ``||``, ``;``, ``|``, ``&`` and newlines.
2. **Quoting** -- operators inside quotes never split.
3. **Redirections** -- kept in raw text, stripped from command text.
4. **Control structures** -- loops, conditionals, groups, subshells.
5. **Parse failures** -- incomplete, unsupported or deeply nested input
   raises UnparseableCommand; quoted heredoc delimiters are normalised.
6. **Wrappers** -- ordered, repeated prefix stripping to a fixed point.
"""
from __future__ import annotations

import pytest

from shellgate.core.errors import CommandError, UnparseableCommand
from shellgate.core.types import RegexSpec, RuleSetSpec, SimpleSpec, WrapperSpec
from shellgate.rules import RuleSet, build_default_rule_set, compile_rule_set
from shellgate.shell import ShellSegment, split_command_chain, strip_wrappers
from shellgate.shell.parser import normalize_heredocs, parse, walk

# ===================================================================
# Fixtures
# ===================================================================


@pytest.fixture(scope="module")
def default_rules() -> RuleSet:
    return build_default_rule_set()


def _texts(line: str) -> list[str]:
    return [segment.text for segment in split_command_chain(line)]


# ===================================================================
# 1. Operators
# ===================================================================


class TestOperators:
    """Top-level operators separate segments."""

    def test_single_command(self) -> None:
        assert split_command_chain("git status") == [
            ShellSegment(raw_text="git status", text="git status"),
        ]

    def test_and_chain(self) -> None:
        assert _texts("git add . && git status") == ["git add .", "git status"]

    def test_or_chain(self) -> None:
        assert _texts("make || echo failed") == ["make", "echo failed"]

    def test_semicolon(self) -> None:
        assert _texts("cd src; ls") == ["cd src", "ls"]

    def test_pipeline(self) -> None:
        assert _texts("cat log | grep error | wc -l") == ["cat log", "grep error", "wc -l"]

    def test_background(self) -> None:
        assert _texts("sleep 5 &") == ["sleep 5"]

    def test_newline(self) -> None:
        assert _texts("git status\ngit diff") == ["git status", "git diff"]

    def test_mixed(self) -> None:
        assert _texts("make && ls | wc -l; echo done") == ["make", "ls", "wc -l", "echo done"]

    def test_whitespace_is_normalised(self) -> None:
        assert _texts("git    status") == ["git status"]

    def test_empty_input(self) -> None:
        assert split_command_chain("") == []
        assert split_command_chain("   \n\t ") == []


# ===================================================================
# 2. Quoting
# ===================================================================


class TestQuoting:
    """Quoted operators are part of a word."""

    def test_double_quoted_operators(self) -> None:
        assert _texts('echo "a && b | c"') == ['echo "a && b | c"']

    def test_single_quoted_operators(self) -> None:
        assert _texts("echo 'x; rm -rf /'") == ["echo 'x; rm -rf /'"]

    def test_escaped_semicolon(self) -> None:
        assert len(split_command_chain(r"find . -exec ls {} \;")) == 1


# ===================================================================
# 3. Redirections
# ===================================================================


class TestRedirections:
    """Redirections stay in raw text and leave the command text."""

    def test_fd_duplication(self) -> None:
        [segment] = split_command_chain("cmd 2>&1")
        assert segment.text == "cmd"
        assert segment.raw_text == "cmd 2>&1"

    def test_output_file(self) -> None:
        [segment] = split_command_chain("ls > out.txt")
        assert segment.text == "ls"
        assert "out.txt" in segment.raw_text

    def test_redirect_inside_pipeline(self) -> None:
        assert _texts("make 2>&1 | tail -n 5") == ["make", "tail -n 5"]

    def test_heredoc_body_in_raw_text(self) -> None:
        [segment] = split_command_chain("cat <<EOF\nhello && world\nEOF\n")
        assert segment.text == "cat"
        assert "hello && world" in segment.raw_text

    @pytest.mark.parametrize("delimiter", ["'EOF'", '"EOF"', "\\EOF", "'E'OF"])
    def test_quoted_heredoc_is_one_segment(self, delimiter: str) -> None:
        [segment] = split_command_chain(f"cat <<{delimiter}\nhello && world\nEOF\n")
        assert segment.text == "cat"
        assert segment.raw_text.startswith(f"cat <<{delimiter}\n")
        assert "hello && world" in segment.raw_text

    def test_compound_redirection_is_its_own_segment(self) -> None:
        segments = split_command_chain("while read line; do echo $line; done < input.txt")
        assert [s.text for s in segments[:-1]] == ["read line", "echo $line"]
        assert segments[-1].text == ""
        assert "input.txt" in segments[-1].raw_text


# ===================================================================
# 4. Control structures
# ===================================================================


class TestControlStructures:
    """Compound commands are flattened into their parts."""

    def test_for_loop(self) -> None:
        assert _texts("for f in a b c; do echo $f; done") == ["for f in a b c", "echo $f"]

    def test_for_loop_header_keeps_substitution(self) -> None:
        [header, body] = split_command_chain("for f in $(ls); do echo $f; done")
        assert header.raw_text == "for f in $(ls)"
        assert body.text == "echo $f"

    def test_while_loop(self) -> None:
        assert _texts("while true; do sleep 1; done") == ["true", "sleep 1"]

    def test_until_loop(self) -> None:
        assert _texts("until false; do sleep 1; done") == ["false", "sleep 1"]

    def test_if_else(self) -> None:
        texts = _texts("if test -f x; then cat x; else touch x; fi")
        assert texts == ["test -f x", "cat x", "touch x"]

    def test_group(self) -> None:
        assert _texts("{ echo a; echo b; }") == ["echo a", "echo b"]

    def test_subshell(self) -> None:
        assert _texts("(cd build && make)") == ["cd build", "make"]

    def test_nested_loop(self) -> None:
        texts = _texts("for d in a b; do for f in x; do ls $d/$f; done; done")
        assert texts == ["for d in a b", "for f in x", "ls $d/$f"]

    def test_process_substitution_inner_commands(self) -> None:
        texts = _texts("diff <(sort a) <(sort b)")
        assert texts[0] == "diff <(sort a) <(sort b)"
        assert texts[1:] == ["sort a", "sort b"]


# ===================================================================
# 5. Parse failures
# ===================================================================


class TestParseFailures:
    """Incomplete or unsupported syntax is unparseable."""

    @pytest.mark.parametrize(
        "line",
        [
            "echo 'unterminated",
            'echo "unterminated',
            "git status &&",
            "for f in a b; do echo $f",
            "if true; then ls",
            "(cd src",
        ],
    )
    def test_raises(self, line: str) -> None:
        with pytest.raises(UnparseableCommand) as exc_info:
            split_command_chain(line)
        assert exc_info.value.code == "SG-E200"
        assert isinstance(exc_info.value, CommandError)
        assert exc_info.value.details["error_type"]

    @pytest.mark.parametrize(
        "line",
        [
            "case x in a) ls;; esac",
            "[[ -f x ]] && ls",
            "time ls",
            "coproc ls",
        ],
    )
    def test_unsupported_syntax_raises(self, line: str) -> None:
        with pytest.raises(UnparseableCommand):
            split_command_chain(line)

    def test_deep_nesting_raises(self) -> None:
        with pytest.raises(UnparseableCommand) as exc_info:
            split_command_chain("(" * 1000 + "ls" + ")" * 1000)
        assert exc_info.value.details["error_type"] == "RecursionError"

    def test_parser_walk_visits_nested_nodes(self) -> None:
        [tree] = parse("echo a && ls | wc")
        kinds = [node.kind for node in walk(tree)]
        assert kinds.count("command") == 3
        assert "pipeline" in kinds


class TestHeredocDelimiters:
    """normalize_heredocs unquotes delimiters in place."""

    def test_single_quoted(self) -> None:
        text = "cat <<'EOF'\nx\nEOF\n"
        source, quoted = normalize_heredocs(text)
        assert source == "cat <<EOF  \nx\nEOF\n"
        assert quoted == frozenset({6})

    def test_backslash_and_dash(self) -> None:
        source, quoted = normalize_heredocs("cat <<-\\EOF\nx\nEOF\n")
        assert source == "cat <<-EOF \nx\nEOF\n"
        assert quoted == frozenset({7})

    def test_lengths_preserved(self) -> None:
        for text in ('cat << "END"\nx\nEND\n', "cat <<'E'OF\nx\nEOF\n"):
            source, _ = normalize_heredocs(text)
            assert len(source) == len(text)

    @pytest.mark.parametrize(
        "text",
        [
            "cat <<EOF\nx\nEOF\n",
            "cat <<<'x'",
            "echo \"a <<'b'\"",
            "echo 'a <<\"b\"'",
            "git status",
        ],
    )
    def test_untouched(self, text: str) -> None:
        assert normalize_heredocs(text) == (text, frozenset())

    def test_parse_positions_index_original_text(self) -> None:
        text = "cat <<'EOF'\nbody\nEOF\n"
        redirects = [n for tree in parse(text) for n in walk(tree) if n.kind == "redirect"]
        [redirect] = redirects
        start, end = redirect.heredoc.pos
        assert "body" in text[start:end]


# ===================================================================
# 6. Wrappers
# ===================================================================


class TestWrappers:
    """strip_wrappers removes benign prefixes repeatedly."""

    def test_no_wrapper(self, default_rules: RuleSet) -> None:
        assert strip_wrappers("pytest -x", default_rules.wrapper_patterns) == ("pytest -x", [])

    def test_timeout_then_nice(self, default_rules: RuleSet) -> None:
        core, applied = strip_wrappers("timeout 30 nice pytest", default_rules.wrapper_patterns)
        assert core == "pytest"
        assert applied == ["timeout", "nice"]

    def test_nice_with_flag(self, default_rules: RuleSet) -> None:
        core, applied = strip_wrappers("nice -n 10 make", default_rules.wrapper_patterns)
        assert core == "make"
        assert applied == ["nice"]

    def test_env_assignments(self, default_rules: RuleSet) -> None:
        core, applied = strip_wrappers("FOO=1 BAR=2 pytest", default_rules.wrapper_patterns)
        assert core == "pytest"
        assert applied == ["env vars"]

    def test_deep_composition(self, default_rules: RuleSet) -> None:
        core, applied = strip_wrappers(
            "timeout 60 env DEBUG=1 .venv/bin/pytest -q",
            default_rules.wrapper_patterns,
        )
        assert core == "pytest -q"
        assert applied == ["timeout", "env", "env vars", ".venv"]

    def test_fixed_point(self, default_rules: RuleSet) -> None:
        core, _ = strip_wrappers("timeout 5 nice env X=1 cargo test", default_rules.wrapper_patterns)
        again, applied = strip_wrappers(core, default_rules.wrapper_patterns)
        assert again == core
        assert applied == []

    def test_declaration_order_decides(self) -> None:
        rules = compile_rule_set(RuleSetSpec(wrappers=[
            RegexSpec(pattern=r"^run\s+", name="first"),
            WrapperSpec(command="run", flags=["<arg>"]),
        ]))
        core, applied = strip_wrappers("run fast thing", rules.wrapper_patterns)
        assert applied == ["first"]
        assert core == "fast thing"

    def test_bare_wrapper_keeps_command(self) -> None:
        rules = compile_rule_set(RuleSetSpec(wrappers=[SimpleSpec(commands=["env"])]))
        assert strip_wrappers("env", rules.wrapper_patterns) == ("env", [])

    def test_empty_match_never_loops(self) -> None:
        rules = compile_rule_set(RuleSetSpec(wrappers=[RegexSpec(pattern=r"^(x\s+)*", name="xs")]))
        assert strip_wrappers("ls", rules.wrapper_patterns) == ("ls", [])
        assert strip_wrappers("x x ls", rules.wrapper_patterns) == ("ls", ["xs"])
