# tests/core/test_parser.py
import pytest
from requests.structures import CaseInsensitiveDict

from pluginshell.core.exceptions import CommandLineInterpretationError
from pluginshell.core.parser import expand_variables, split_flow_control, tokenize


@pytest.fixture
def variables():
    v = CaseInsensitiveDict()
    v["Name"] = "World"
    v["path"] = "/tmp/out dir"
    return v


def test_tokenize_simple_command():
    """A line is split on whitespace."""
    assert tokenize("echo hello world") == ["echo", "hello", "world"]


def test_tokenize_quoted_arguments():
    """Quoted spans stay one argument and lose their quotes."""
    assert tokenize('set greeting "hello   world" x') == ["set", "greeting", "hello   world", "x"]


def test_tokenize_unterminated_quote_is_tolerated():
    assert tokenize('echo "hello world') == ["echo", "hello world"]


def test_tokenize_drops_empty_tokens():
    """An empty quoted string produces no argument."""
    assert tokenize('echo "" a') == ["echo", "a"]


def test_tokenize_empty_and_whitespace_input():
    assert tokenize("") == []
    assert tokenize("    ") == []
    assert tokenize(None) == []


def test_variable_expansion_is_case_insensitive(variables):
    assert tokenize("echo %NAME% %name%", variables) == ["echo", "World", "World"]


def test_unknown_variable_is_left_verbatim(variables):
    assert expand_variables("echo %missing% 100%", variables) == "echo %missing% 100%"


def test_expanded_value_is_split_unless_quoted(variables):
    """Expansion happens before tokenizing, so a value with spaces needs quotes."""
    assert tokenize("echo %path%", variables) == ["echo", "/tmp/out", "dir"]
    assert tokenize('echo "%path%"', variables) == ["echo", "/tmp/out dir"]


def test_split_single_segment():
    flow = split_flow_control(["echo", "a"])
    assert flow.segments == [["echo", "a"]]
    assert flow.redirect_path is None
    assert flow.append is False


def test_split_pipeline_segments():
    flow = split_flow_control(["help", "|", "grep", "e", "|", "count"])
    assert flow.segments == [["help"], ["grep", "e"], ["count"]]


def test_split_redirect_removes_the_tail():
    """The first redirect applies to the whole line; everything after the path is dropped."""
    flow = split_flow_control(["echo", "a", "|", "count", ">", "out.txt", "ignored"])
    assert flow.segments == [["echo", "a"], ["count"]]
    assert flow.redirect_path == "out.txt"
    assert flow.append is False


def test_split_append_redirect():
    flow = split_flow_control(["echo", "a", ">>", "out.txt"])
    assert flow.redirect_path == "out.txt"
    assert flow.append is True


def test_split_redirect_without_path_fails():
    with pytest.raises(CommandLineInterpretationError) as excinfo:
        split_flow_control(["echo", "a", ">"])
    assert excinfo.value.arguments == ["echo", "a", ">"]


def test_split_dangling_pipe_fails():
    with pytest.raises(CommandLineInterpretationError):
        split_flow_control(["echo", "a", "|"])
