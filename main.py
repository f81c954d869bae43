"""
B Programming Language - Main Entry Point
An imperative expression language over a simulated, garbage-collected store
"""

import sys
import argparse
from pathlib import Path
import os

# Readline support for history
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from parsing import create_parser, create_debug_parser, pretty_print_tree
from interpreter import create_interpreter
from error_handling import BParseError, BRuntimeError
from printer import format_memory_size, value2str


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      description='B Programming Language - expression trees over a garbage-collected store',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s program.b              # Run every term in program.b
  %(prog)s --quiet-gc program.b   # Run without collector traces
  %(prog)s --parse program.b      # Load and show the expression trees
  %(prog)s --debug program.b      # Run with per-step debug output
  %(prog)s -i                     # Interactive mode
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='Term-notation file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Load file and show the expression trees'
  )

  parser.add_argument(
      '--quiet-gc',
      action='store_true',
      help='Do not print collector traces'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output'
  )

  parser.add_argument(
      '--version',
      action='version',
      version='B v0.1.0'
  )

  return parser


def print_runtime_error(error: BRuntimeError, where: str = "") -> None:
  print(f"\n{'='*70}")
  print(f"Runtime Error{where}")
  print(f"{'='*70}")
  print(f"\n{error.kind}: {error.message}")
  print(f"\n{'='*70}\n")


def parse_file(script_path: str, debug: bool = False) -> None:
  """Load a term-notation file and show its expression trees"""
  try:
    parser = create_debug_parser() if debug else create_parser()
    trees = parser.parse_file(script_path)

    print(f"\nLoaded {len(trees)} top-level terms:")
    print("=" * 50)
    for i, tree in enumerate(trees, 1):
      print(f"\nTerm {i}:")
      print(pretty_print_tree(tree))

  except BParseError as e:
    print(f"Parse error in '{script_path}': {e}")
    sys.exit(1)


def run_script_file(script_path: str, trace_gc: bool = True, debug: bool = False) -> None:
  """Run every top-level term of a file with one shared interpreter"""
  try:
    parser = create_debug_parser() if debug else create_parser()
    interpreter = create_interpreter(debug=debug, trace_gc=trace_gc)

    trees = parser.parse_file(script_path)
    if debug:
      print(f"Loaded {len(trees)} terms from {script_path}")

    for tree in trees:
      result = interpreter.run(tree, echo=True)
      print(format_memory_size(result['memory_size']))
      print(f"=> {value2str(result['value'])}")

  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'")
    sys.exit(1)
  except BParseError as e:
    print(f"Parse error in '{script_path}': {e}")
    sys.exit(1)
  except BRuntimeError as e:
    print_runtime_error(e, f" in '{script_path}'")
    sys.exit(1)


def setup_readline():
  """Setup readline history"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser("~/.b_history")
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet

  readline.set_history_length(1000)

  import atexit
  atexit.register(readline.write_history_file, history_file)


def run_interactive_mode(trace_gc: bool = True, debug: bool = False) -> None:
  """Evaluate one term per line; every term starts from an empty environment"""
  print("B v0.1.0 - Interactive Mode")
  print("Enter one term per line, e.g. ADD (NUM 1, NUM 2). Type 'exit' to quit")
  print()

  setup_readline()

  parser = create_debug_parser() if debug else create_parser()
  interpreter = create_interpreter(debug=debug, trace_gc=trace_gc)

  while True:
    try:
      code = input("b> ")
    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!")
      break

    if code.strip() == "exit":
      break
    if not code.strip():
      continue

    try:
      tree = parser.parse_expression(code)
      result = interpreter.run(tree, echo=True)
      print(f"=> {value2str(result['value'])}  ({format_memory_size(result['memory_size'])})")
    except BParseError as e:
      print(f"Parse error: {e}")
    except BRuntimeError as e:
      print(f"\nRuntime Error:")
      print(f"  {e.kind}: {e.message}")
      print()


def show_language_info() -> None:
  """Show B language information"""
  print("B Programming Language")
  print("=" * 50)
  print("An imperative expression language with:")
  print("• Mutable variables over an explicit store")
  print("• Call-by-value and call-by-reference procedures")
  print("• Heap-allocated records")
  print("• A tracing collector run on every evaluation step")
  print()


def main() -> None:
  """Main entry point for B"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args()
  trace_gc = not args.quiet_gc

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist")
      sys.exit(1)

    if args.parse:
      parse_file(args.script, debug=args.debug)
    else:
      run_script_file(args.script, trace_gc=trace_gc, debug=args.debug)

  elif args.interactive:
    run_interactive_mode(trace_gc=trace_gc, debug=args.debug)

  else:
    arg_parser.print_help()
    print()
    show_language_info()


if __name__ == "__main__":
  main()
