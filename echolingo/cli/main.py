"""Console-script entry point for echolingo."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from . import batch_import, init_db
from .args import parse_cli_args


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the echolingo maintenance CLI."""

    args = parse_cli_args(argv)
    if args.command == "import":
        return batch_import.run(args)
    return init_db.run(args)


if __name__ == "__main__":  # pragma: no cover - manual execution
    sys.exit(main())
