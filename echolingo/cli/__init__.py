"""Command line interface for echolingo maintenance tasks.

* :mod:`echolingo.cli.args` builds the ``import`` and ``init-db`` parsers.
* :mod:`echolingo.cli.batch_import` looks up a word list and upserts results.
* :mod:`echolingo.cli.init_db` creates the tables and applies column upgrades.
"""

from . import args, batch_import, context, init_db

__all__ = ["args", "batch_import", "context", "init_db"]
