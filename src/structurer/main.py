"""
Structurer Service - Main entry point.
Turns an uploaded job description file into a structured job draft.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click
import yaml
from loguru import logger

from extractor.documents import media_type_for_path
from shared.completion import OpenAICompletionService
from shared.config import get_settings
from shared.errors import HiringCoreError
from shared.log import setup_logging
from shared.models import JobDraft

from .jd_structurer import JobStructurer


async def structure_file(
    path: Path,
    media_type: Optional[str] = None,
    overrides: Optional[dict] = None,
    description: Optional[str] = None,
) -> JobDraft:
    """
    Structure a JD file.

    Args:
        path: JD document (PDF, DOC, DOCX or TXT)
        media_type: Declared media type; guessed from the suffix if omitted
        overrides: Manually entered structured fields that win over the AI
        description: Manually written description that replaces the rendered one

    Returns:
        JobDraft with the formatted description and any missing fields
    """
    settings = get_settings()
    media_type = media_type or media_type_for_path(path)

    logger.info(f"Structuring JD file: {path} ({media_type})")
    structurer = JobStructurer(OpenAICompletionService(settings, temperature=0.2))
    return await structurer.structure_document(
        path, media_type, overrides=overrides, description=description
    )


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--media-type",
    "-t",
    default=None,
    help="Declared media type (default: guessed from file suffix)",
)
@click.option(
    "--overrides",
    "-o",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON/YAML file of manually entered fields, including 'description'",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Exit non-zero when required fields are missing",
)
def main(
    path: Path,
    media_type: Optional[str],
    overrides: Optional[Path],
    strict: bool,
):
    """JD Structurer - Extracts a structured job description from a file."""
    setup_logging()

    manual = None
    description = None
    if overrides:
        with open(overrides) as f:
            manual = yaml.safe_load(f) or {}
        description = manual.pop("description", None)

    try:
        draft = asyncio.run(
            structure_file(path, media_type=media_type, overrides=manual, description=description)
        )
    except HiringCoreError as e:
        logger.error(f"JD structuring failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(draft.model_dump(by_alias=True), indent=2, ensure_ascii=False))

    if not draft.is_complete:
        click.echo(
            f"Please provide the following required fields: {', '.join(draft.missing_fields)}",
            err=True,
        )
        if strict:
            sys.exit(1)


if __name__ == "__main__":
    main()
