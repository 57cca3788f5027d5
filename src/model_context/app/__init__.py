from .cli import apply_overrides, build_parser, drain_connections, parse_args, run, run_client
from .client import ContextClient, run_interactive, translate_input

__all__ = [
    "ContextClient",
    "apply_overrides",
    "build_parser",
    "drain_connections",
    "parse_args",
    "run",
    "run_client",
    "run_interactive",
    "translate_input",
]
