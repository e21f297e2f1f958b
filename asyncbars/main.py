"""
Command line entry point for asyncbars
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from asyncbars import __version__
from asyncbars.config import get_settings
from asyncbars.template_system import AsyncTemplateEngine, TemplateNotFoundError
from asyncbars.utils import get_logger, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asyncbars-render",
        description="Render a template and resolve its async helpers",
    )
    parser.add_argument("template", help="template name relative to the template dir")
    parser.add_argument("--template-dir", type=Path, default=None)
    parser.add_argument("--model", type=Path, default=None, help="JSON file")
    parser.add_argument("--timeout", type=float, default=None, help="seconds")
    parser.add_argument("--version", action="version", version=__version__)
    return parser


def load_model(path: Path | None) -> dict[str, Any]:
    """モデル JSON を読み込む"""
    if path is None:
        return {}
    with open(path, encoding="utf-8") as f:
        model = json.load(f)
    if not isinstance(model, dict):
        raise ValueError(f"Model file must contain a JSON object: {path}")
    return model


async def run(args: argparse.Namespace) -> str:
    engine = AsyncTemplateEngine(args.template_dir, settings=get_settings())
    await engine.load_templates()
    return await engine.render(
        args.template, load_model(args.model), timeout=args.timeout
    )


def main(argv: list[str] | None = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)

    setup_logging()
    logger = get_logger("main")
    logger.debug("Starting asyncbars", version=__version__)

    try:
        output = asyncio.run(run(args))
    except TemplateNotFoundError as exc:
        logger.error("Template not found", template=args.template, error=str(exc))
        return 1
    except (OSError, ValueError) as exc:
        logger.error("Failed to render template", error=str(exc))
        return 1

    sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
