"""
Main CLI module with argument parsing and command execution.

This module provides the main CLI interface including:
- Command line argument parsing
- Command routing and execution
- Mapping of declared errors to exit codes
"""
import argparse
import os
import sys
import traceback
from typing import IO, Any, Dict, List, Optional

from patternkit._package import DESCRIPTION, __version__
from patternkit.cli.commands import (
    COMMAND_HANDLERS,
    STEP_CATALOG,
    layer_spec,
    registry_entry_spec,
    transition_spec,
)
from patternkit.cli.formatters import format_output
from patternkit.config.schemas import OUTPUT_FORMATS
from patternkit.domain.exceptions import PatternKitError


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per component."""
    parser = argparse.ArgumentParser(
        prog=os.path.basename(sys.argv[0]) or "patternkit",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s registry --entry A:cached --entry B A A B B
  %(prog)s chain --step upper --step trim --step reject-empty "  hi  " "   "
  %(prog)s layers --layer prefix=">> " --layer deny=spam "hello"
  %(prog)s dispatch --subscriber alice --subscriber bob --exclude alice "hi all"
  %(prog)s state --transition idle:coin:ready --transition ready:push:idle coin push
        """
    )

    # Global options
    parser.add_argument('--config', help='Configuration file path (YAML or JSON)')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Override the configured log level')
    parser.add_argument('--format', choices=OUTPUT_FORMATS, help='Output format')
    parser.add_argument('--output', help='Output file (default: stdout)')
    parser.add_argument('--quiet', action='store_true', help='Suppress non-essential output')
    parser.add_argument('--verbose', action='store_true', help='Print tracebacks for unexpected errors')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Available components')

    # Registry
    registry_parser = subparsers.add_parser('registry', help='Register entries and resolve keys')
    registry_parser.add_argument('--entry', action='append', default=[], type=registry_entry_spec,
                                 metavar='KEY[:MODE]',
                                 help='Register KEY as cached, fresh (default) or prototype')
    registry_parser.add_argument('--overwrite', action='store_true',
                                 help='Let later --entry options replace earlier ones')
    registry_parser.add_argument('inputs', nargs='*', metavar='KEY', help='Keys to resolve (default: stdin lines)')

    # Chain
    chain_parser = subparsers.add_parser('chain', help='Run text through a chain of steps')
    chain_parser.add_argument('--step', action='append', default=[], choices=sorted(STEP_CATALOG),
                              help='Append a step; order is execution order')
    chain_parser.add_argument('--require-handler', action='store_true',
                              help="Report 'unhandled' when no step short-circuits")
    chain_parser.add_argument('--strict', action='store_true',
                              help='Fail on rejected or unhandled results')
    chain_parser.add_argument('inputs', nargs='*', metavar='TEXT', help='Inputs (default: stdin lines)')

    # Layers
    layers_parser = subparsers.add_parser('layers', help='Invoke an echo function through decorator layers')
    layers_parser.add_argument('--layer', action='append', default=[], type=layer_spec,
                               metavar='SPEC',
                               help='prefix=TEXT, suffix=TEXT, upper, deny=WORD or trace[=LABEL]; '
                                    'first is innermost')
    layers_parser.add_argument('inputs', nargs='*', metavar='TEXT', help='Inputs (default: stdin lines)')

    # Dispatch
    dispatch_parser = subparsers.add_parser('dispatch', help='Publish events to subscribers')
    dispatch_parser.add_argument('--subscriber', action='append', default=[], metavar='ID',
                                 help='Subscribe a recorder; order is delivery order')
    dispatch_parser.add_argument('--fail', action='append', default=[], metavar='ID',
                                 help='Make a subscriber raise on every event')
    dispatch_parser.add_argument('--exclude', metavar='ID', help='Leave this subscriber out (the sender)')
    dispatch_parser.add_argument('--strict', action='store_true',
                                 help='Fail when any subscriber raised')
    dispatch_parser.add_argument('inputs', nargs='*', metavar='EVENT', help='Events (default: stdin lines)')

    # State
    state_parser = subparsers.add_parser('state', help='Fire events against a transition table')
    state_parser.add_argument('--transition', action='append', required=True, type=transition_spec,
                              metavar='SOURCE:EVENT:TARGET', help='Declare a transition')
    state_parser.add_argument('--initial', help='Initial state (default: first source)')
    state_parser.add_argument('inputs', nargs='*', metavar='EVENT', help='Events (default: stdin lines)')

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == 'state':
        _check_transition_table(parser, args)
    return args


def _check_transition_table(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    """Reject tables the state machine would refuse, as usage errors."""
    targets: Dict[Any, str] = {}
    declared = set()
    for source, event, target in args.transition:
        previous = targets.setdefault((source, event), target)
        if previous != target:
            parser.error(
                f"argument --transition: '{source}:{event}' leads to both '{previous}' and '{target}'"
            )
        declared.update((source, target))
    if args.initial and args.initial not in declared:
        parser.error(f"argument --initial: state '{args.initial}' does not appear in any --transition")


def read_inputs(args: argparse.Namespace, stdin: IO[str]) -> List[str]:
    """Positional inputs, or one input per stdin line when none were given."""
    if args.inputs:
        return list(args.inputs)
    if stdin is None or stdin.isatty():
        return []
    return [line.rstrip("\r\n") for line in stdin]


def execute_command(args: argparse.Namespace, app: Any) -> Dict[str, Any]:
    """Execute the appropriate command handler."""
    handler = COMMAND_HANDLERS.get(args.command)
    if handler is None:
        raise ValueError(f"Unknown command: {args.command}")
    return handler(args, app)


def _load_application(args: argparse.Namespace):
    from patternkit.bootstrap import create_application
    from patternkit.config.manager import get_config_manager

    config = get_config_manager(args.config).app_config
    if args.log_level:
        config = config.model_copy(
            update={"logging": config.logging.model_copy(update={"level": args.log_level})}
        )
    return create_application(config=config)


def main(argv: Optional[List[str]] = None, stdin: Optional[IO[str]] = None,
         stdout: Optional[IO[str]] = None, stderr: Optional[IO[str]] = None) -> int:
    """Main CLI entry point; returns the process exit code."""
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout
    stderr = stderr if stderr is not None else sys.stderr

    args = parse_args(argv)
    if not args.command:
        print("Error: No command specified. Use --help for usage information.", file=stderr)
        return 1

    try:
        app = _load_application(args)
    except PatternKitError as e:
        print(f"{e.error_kind}: {e}", file=stderr)
        return 1

    try:
        args.inputs = read_inputs(args, stdin)
        result = execute_command(args, app)

        output_format = args.format or app.config.output_format
        formatted_output = format_output(result, output_format)

        if args.output:
            with open(args.output, 'w', encoding='utf-8') as f:
                f.write(formatted_output + "\n")
            if not args.quiet:
                print(f"Output written to {args.output}", file=stdout)
        else:
            print(formatted_output, file=stdout)
        return 0

    except PatternKitError as e:
        app.logger.debug("Command failed", command=args.command, error_kind=e.error_kind)
        print(f"{e.error_kind}: {e}", file=stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=stderr)
        return 130
    except Exception as e:
        app.logger.error(f"Unexpected error: {e}")
        if args.verbose:
            traceback.print_exc(file=stderr)
        print(f"Unexpected error: {e}", file=stderr)
        return 1
    finally:
        app.shutdown()


if __name__ == "__main__":
    sys.exit(main())
