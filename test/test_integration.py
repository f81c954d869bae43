"""
Integration tests: load the bundled programs and run them end to end
"""

import pytest
from parsing import create_parser
from interpreter import create_interpreter, make_execution_context, run_programs
from main import run_script_file
from printer import value2str


PROGRAMS = [
    # file, rendered result, final memory size
    ("factorial.b", "120", 2),
    ("reference_update.b", "6", 2),
    ("value_swap.b", "10", 3),
    ("shadowing.b", "39", 2),
    ("record_swap.b", "13", 3),
]


class TestPrograms:
  """Every bundled program evaluates to its documented result"""

  @pytest.fixture
  def parser(self):
    return create_parser()

  @pytest.mark.parametrize("filename, expected, memory_size", PROGRAMS)
  def test_program(self, parser, programs_dir, filename, expected, memory_size):
    tree, = parser.parse_file(str(programs_dir / filename))
    result = create_interpreter().run(tree)

    assert value2str(result['value']) == expected
    assert result['memory_size'] == memory_size
    assert result['diagnostics'][-1].startswith("[")

  def test_record_swap_writes_old_x(self, parser, programs_dir):
    tree, = parser.parse_file(str(programs_dir / "record_swap.b"))
    result = create_interpreter(trace_gc=False).run(tree)
    assert result['diagnostics'] == ["10"]

  def test_programs_share_location_counter(self, parser, programs_dir):
    trees = [parser.parse_file(str(programs_dir / name))[0] for name, _, _ in PROGRAMS]
    context = make_execution_context(trace_gc=False)
    results = run_programs(trees, context)

    assert [value2str(r['value']) for r in results] == [expected for _, expected, _ in PROGRAMS]
    assert context['allocator'].counter > len(PROGRAMS)
    assert context['frames'] == []


class TestScriptRunner:
  """Command line script execution"""

  def test_run_script_prints_results(self, programs_dir, capsys):
    run_script_file(str(programs_dir / "shadowing.b"), trace_gc=False)
    out = capsys.readouterr().out
    assert "memory size: 2" in out
    assert "=> 39" in out

  def test_runtime_error_exits(self, tmp_path, capsys):
    script = tmp_path / "bad.b"
    script.write_text("DIV (NUM 1, NUM 0);;")
    with pytest.raises(SystemExit) as exc_info:
      run_script_file(str(script), trace_gc=False)
    assert exc_info.value.code == 1
    assert "DivisionByZero" in capsys.readouterr().out

  def test_parse_error_exits(self, tmp_path, capsys):
    script = tmp_path / "bad.b"
    script.write_text("ADD (NUM 1)")
    with pytest.raises(SystemExit):
      run_script_file(str(script))
    assert "Parse error" in capsys.readouterr().out

  def test_deep_recursion_exits(self, tmp_path, capsys):
    script = tmp_path / "deep.b"
    script.write_text(
        'LETF ("down", ["n"], IF (LESS (VAR "n", NUM 1), NUM 0, '
        'ADD (NUM 1, CALLV ("down", [SUB (VAR "n", NUM 1)]))), '
        'CALLV ("down", [NUM 5000]));;')
    with pytest.raises(SystemExit) as exc_info:
      run_script_file(str(script), trace_gc=False)
    assert exc_info.value.code == 1
    assert "EvaluationTooDeep" in capsys.readouterr().out
