"""Tests for the invocation parser and its canonical serialization."""
from __future__ import annotations

import pytest
from orchestra_core.errors import WorkflowSyntaxError
from orchestra_workflow.invocation import Invocation, escape, parse, serialize


class TestParse:
    def test_parse_with_capture(self) -> None:
        """The canonical scenario: agent, instruction and output variable."""
        inv = parse('explore:"find bugs":bugs')

        assert inv == Invocation(
            agent_name="explore", instruction="find bugs", output_variable="bugs"
        )

    def test_parse_without_capture(self) -> None:
        inv = parse('code-reviewer:"review the diff"')

        assert inv.agent_name == "code-reviewer"
        assert inv.instruction == "review the diff"
        assert inv.output_variable is None

    def test_parse_keeps_placeholders_verbatim(self) -> None:
        inv = parse('fix:"patch {bugs} in {module_name}"')

        assert inv.instruction == "patch {bugs} in {module_name}"

    def test_surrounding_whitespace_is_ignored(self) -> None:
        inv = parse('   Plan:"outline the work":plan  \n')

        assert inv.agent_name == "Plan"
        assert inv.output_variable == "plan"

    def test_escaped_quote_is_unescaped(self) -> None:
        inv = parse(r'explore:"find \"TODO\" markers":todos')

        assert inv.instruction == 'find "TODO" markers'
        assert inv.output_variable == "todos"

    def test_lone_backslash_is_literal(self) -> None:
        inv = parse(r'explore:"grep for C:\temp paths"')

        assert inv.instruction == "grep for C:\\temp paths"

    def test_multiline_instruction(self) -> None:
        inv = parse('general-purpose:"first\n\nsecond":out')

        assert inv.instruction == "first\n\nsecond"

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "explore",
            'explore:"find bugs',
            'explore:find bugs',
            'explore:"find "bugs""',
            'explore:"find bugs" :bugs',
            'explore:"find bugs":',
            'explore:"find bugs":bu gs',
            'explore:"find bugs":bugs:extra',
            'bad name:"find bugs"',
            'explore.x:"find bugs"',
            'explore:"find bugs" trailing',
            'explore:""',
            'explore:"unterminated\\"',
        ],
    )
    def test_rejects_invalid_lines(self, line: str) -> None:
        """Anything outside the grammar rejects the whole line."""
        with pytest.raises(WorkflowSyntaxError):
            parse(line)

    def test_error_carries_offending_text(self) -> None:
        with pytest.raises(WorkflowSyntaxError, match="Invalid agent invocation syntax") as info:
            parse('explore:"x" :bugs')

        assert info.value.text == 'explore:"x" :bugs'
        assert "explore" in str(info.value)


class TestSerialize:
    @pytest.mark.parametrize(
        "line",
        [
            'explore:"find bugs":bugs',
            'fix:"patch {bugs}"',
            r'explore:"say \"hi\"":greeting',
            r'explore:"path C:\temp"',
            'general-purpose:"You are security-focused.\n\nscan auth module":findings',
        ],
    )
    def test_serialize_inverts_parse(self, line: str) -> None:
        assert serialize(parse(line)) == line

    def test_serialize_normalizes_whitespace(self) -> None:
        assert serialize(parse('  explore:"x":y \t')) == 'explore:"x":y'

    def test_escape_rejects_trailing_backslash(self) -> None:
        with pytest.raises(ValueError):
            escape("ends with \\")


class TestInvocationRecord:
    def test_is_immutable(self) -> None:
        inv = parse('explore:"find bugs":bugs')

        with pytest.raises(AttributeError):
            inv.agent_name = "other"  # type: ignore[misc]

    def test_rejects_invalid_agent_name(self) -> None:
        with pytest.raises(ValueError):
            Invocation(agent_name="no spaces", instruction="x")

    def test_rejects_empty_instruction(self) -> None:
        with pytest.raises(ValueError):
            Invocation(agent_name="explore", instruction="")
