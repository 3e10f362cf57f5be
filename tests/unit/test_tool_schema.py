"""Unit tests for tool schema models."""
import pytest
from pydantic import ValidationError

from models.tool_schema import (NO_OUTPUT_PLACEHOLDER, CommandArguments,
                                ToolDefinition, ToolResult, arguments_schema)


class TestCommandArguments:
    """Tests for CommandArguments."""

    def test_tokens_split_on_whitespace_runs(self):
        payload = CommandArguments(arguments="get  pods\t-n\nkube-system")
        assert payload.tokens() == ["get", "pods", "-n", "kube-system"]

    def test_quotes_are_not_interpreted(self):
        payload = CommandArguments(arguments="logs 'my pod'")
        assert payload.tokens() == ["logs", "'my", "pod'"]

    def test_empty_string_yields_no_tokens(self):
        assert CommandArguments(arguments="").tokens() == []
        assert CommandArguments(arguments="   ").tokens() == []

    def test_rejoined_tokens_tokenize_identically(self):
        tokens = CommandArguments(arguments=" describe   pod\tweb-1 ").tokens()
        assert CommandArguments(arguments=" ".join(tokens)).tokens() == tokens

    @pytest.mark.parametrize("value", [42, None, ["get", "pods"], {"a": 1}])
    def test_non_string_rejected(self, value):
        with pytest.raises(ValidationError):
            CommandArguments(arguments=value)

    def test_missing_field_rejected(self):
        with pytest.raises(ValidationError):
            CommandArguments.model_validate({"args": "get pods"})


class TestToolDefinition:
    """Tests for ToolDefinition."""

    def test_default_schema(self):
        definition = ToolDefinition(name="kubectl", description="Inspect")
        assert definition.input_schema["required"] == ["arguments"]

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            ToolDefinition(name="", description="x")

    def test_frozen(self):
        definition = ToolDefinition(name="kubectl", description="Inspect")
        with pytest.raises(ValidationError):
            definition.name = "helm"

    def test_arguments_schema_description(self):
        schema = arguments_schema("The arguments to pass to the k8sgpt command")
        assert schema["type"] == "object"
        assert (
            schema["properties"]["arguments"]["description"]
            == "The arguments to pass to the k8sgpt command"
        )


class TestToolResult:
    """Tests for ToolResult."""

    def test_ok(self):
        result = ToolResult.ok("kubectl", NO_OUTPUT_PLACEHOLDER)

        assert result.success is True
        assert result.output == "Command executed successfully with no output"
        assert result.error is None
        assert result.error_category is None

    def test_failure(self):
        result = ToolResult.failure(
            "kubectl", "non_zero_exit", "kubectl exited with code 1: boom", exit_code=1
        )

        assert result.success is False
        assert result.output is None
        assert result.exit_code == 1
        assert result.error_category == "non_zero_exit"

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            ToolResult.failure("kubectl", "exploded", "x")
