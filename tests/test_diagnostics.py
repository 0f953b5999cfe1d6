import io

from jabukod.diagnostics import ErrorReporter, Phase


def make_reporter():
    stream = io.StringIO()
    return ErrorReporter(stream), stream


def test_lexical_error_output():
    reporter, stream = make_reporter()
    reporter.lexical_error(3, 7, "token recognition error")
    output = stream.getvalue()
    assert "Lexical error" in output
    assert "3:7" in output
    assert "token recognition error" in output
    assert output.endswith("\n")
    assert reporter.lexical_errors == 1
    assert reporter.syntax_errors == 0


def test_syntax_phase_by_default():
    reporter, stream = make_reporter()
    assert reporter.phase is Phase.SYNTAX
    reporter.syntax_error(1, 0, "missing ';'")
    output = stream.getvalue()
    assert "Syntax error" in output
    assert "Semantic error" not in output
    assert "missing ';'" in output


def test_semantic_phase():
    reporter, stream = make_reporter()
    reporter.set_semantic_phase()
    reporter.syntax_error(2, 4, "undefined variable")
    output = stream.getvalue()
    assert reporter.phase is Phase.SEMANTIC
    assert "Semantic error" in output
    assert "Syntax error" not in output
    assert "2:4" in output


def test_errors_are_counted():
    reporter, stream = make_reporter()
    reporter.syntax_error(1, 1, "first")
    reporter.set_semantic_phase()
    reporter.syntax_error(2, 2, "second")
    reporter.lexical_error(3, 3, "third")
    assert reporter.syntax_errors == 2
    assert reporter.lexical_errors == 1
    assert stream.getvalue().count("\n") == 3