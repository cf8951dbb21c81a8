"""Command line entry point.

  jshellpanel                 open the GUI
  jshellpanel run script.jsh  run a script headless, streaming its output
  jshellpanel check           report which jshell would be used

Flags for jshell are given attached to their option so argparse does not
mistake them for options of its own, e.g. ``-J-verbose`` or
``-R-javaagent:agent.jar``.
"""

import argparse
import sys
import traceback
import uuid

from jshellpanel.jshell_exec import JShellExec
from jshellpanel.logging_utils import setup_logging
from jshellpanel.settings_store import load_settings, split_flags

EXIT_SETUP_FAILURE = 1
EXIT_UNAVAILABLE = 2
EXIT_INTERRUPTED = 130


def build_parser():
    parser = argparse.ArgumentParser(prog="jshellpanel", description="Edit and run jshell scripts")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("gui", help="Open the script panel (default)")

    run_p = sub.add_parser("run", help="Run a script and stream its output")
    run_p.add_argument("script", nargs="?", help="Script file, or - to read from stdin")
    run_p.add_argument("-e", "--code", help="Script code given inline instead of a file")
    run_p.add_argument("-J", dest="runtime_flags", action="append", metavar="FLAG", help="Runtime flag for jshell's VM (repeatable)")
    run_p.add_argument("-R", dest="remote_runtime_flags", action="append", metavar="FLAG", help="Runtime flag for the VM executing the code (repeatable)")
    run_p.add_argument("-C", dest="compiler_flags", action="append", metavar="FLAG", help="Compiler flag (repeatable)")
    run_p.add_argument("--class-path", help="Class path handed to jshell")
    run_p.add_argument("--jshell", help="jshell executable to use")

    check_p = sub.add_parser("check", help="Show the jshell executable and whether it is usable")
    check_p.add_argument("--jshell", help="jshell executable to check")
    return parser


def _read_code(args):
    if args.code is not None:
        return args.code
    if args.script == "-":
        return sys.stdin.read()
    with open(args.script, "r", encoding="utf-8") as f:
        return f.read()


def cmd_run(args, settings) -> int:
    exec_ = JShellExec(args.jshell or settings.get("jshell_path") or None,
                       args.class_path or settings.get("class_path") or None)
    exec_.debug = args.debug
    if not exec_.is_available():
        print(f"jshell executable not found: {exec_.executable}", file=sys.stderr)
        return EXIT_UNAVAILABLE

    try:
        code = _read_code(args)
    except OSError as e:
        print(f"Failed to read script: {e}", file=sys.stderr)
        return EXIT_SETUP_FAILURE

    def on_error(event):
        print(event.message, file=sys.stderr)
        if event.has_exception:
            traceback.print_exception(event.exception, file=sys.stderr)

    exec_.add_error_listener(on_error)

    started = exec_.run_script(
        code,
        args.runtime_flags if args.runtime_flags is not None else split_flags(settings.get("runtime_flags")),
        args.remote_runtime_flags if args.remote_runtime_flags is not None else split_flags(settings.get("remote_runtime_flags")),
        args.compiler_flags if args.compiler_flags is not None else split_flags(settings.get("compiler_flags")),
    )
    if not started:
        return EXIT_SETUP_FAILURE
    try:
        exec_.wait()
    except KeyboardInterrupt:
        exec_.stop_script()
        exec_.wait(5)
        return EXIT_INTERRUPTED
    if exec_.exit_code is None:
        # jshell could not be launched
        return EXIT_SETUP_FAILURE
    return exec_.exit_code


def cmd_check(args, settings) -> int:
    exec_ = JShellExec(args.jshell or settings.get("jshell_path") or None)
    available = exec_.is_available()
    print(f"jshell: {exec_.executable}")
    print(f"available: {'yes' if available else 'no'}")
    return 0 if available else 1


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    command = args.command or "gui"
    settings = load_settings()
    if args.debug:
        settings["debug"] = True

    if command == "gui":
        from jshellpanel.ui.app_window import run
        return run(settings=settings)

    if command == "run" and args.code is None and args.script is None:
        parser.error("run needs a script file, - or --code")

    setup_logging(settings, str(uuid.uuid4())[:8], redirect_std=False)
    if command == "run":
        return cmd_run(args, settings)
    return cmd_check(args, settings)


if __name__ == "__main__":
    raise SystemExit(main())
