"""Entry points: parse and validate a DBML file, then write its migrations."""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from os import PathLike

from .errors import AppError
from .files import read_file
from .generation import generate_migrate_files, load_default_values
from .model import Definition
from .parser import parse_all
from .project import ConfigPath, init
from .validator import validate_structure

logger = logging.getLogger(__name__)


def parse_file(text: str, schema_config: str | PathLike[str]) -> list[Definition]:
    """Parse ``text`` and validate it against the schema file ``schema_config``."""
    definitions, rest = parse_all(text)
    logger.debug("last：%s", rest)
    for item in definitions:
        logger.info("%r", item)

    validate_structure(definitions, schema_config)
    logger.info("Validation passed.")
    for item in definitions:
        logger.info("%r", item)
    return definitions


def generate_file(definitions: Sequence[Definition], paths: ConfigPath) -> None:
    """Write the migrations for ``definitions`` using the configured paths."""
    defaults = load_default_values(paths.generation_config)
    generate_migrate_files(
        definitions, defaults, paths.template_path, paths.output_path
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line tool; return the process exit status."""
    logging.basicConfig(level=logging.INFO)
    try:
        paths = init(argv)
        text = read_file(paths.input_path)
        logger.info("Parsing and validating the DBML file.")
        definitions = parse_file(text, paths.schema_config)
        logger.info("Generating migration file.")
        generate_file(definitions, paths)
    except AppError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    logger.info("Generation is succeed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())