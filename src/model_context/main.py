from __future__ import annotations

from collections.abc import Sequence

from model_context.app import run, run_client


def main(argv: Sequence[str] | None = None) -> int:
    # Single-line entrypoint delegating to the server CLI.
    return run(list(argv) if argv is not None else None)


def client_main(argv: Sequence[str] | None = None) -> int:
    return run_client(list(argv) if argv is not None else None)


if __name__ == "__main__":
    raise SystemExit(main())
