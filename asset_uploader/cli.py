"""
Command-line interface for the asset uploader.
"""
import argparse
import logging
import mimetypes
import os
import sys
from pathlib import Path
from typing import List, Optional

from .config import load_config
from .coordinator import UploadOrchestrator
from .errors import ConfigError
from .models import FileMetadata, UploadProgress

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application.

    Args:
        verbose: Whether to enable debug logging
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def read_file(path: Path, mime_type: Optional[str] = None) -> FileMetadata:
    """Read a local file into FileMetadata.

    Args:
        path: Path to the file
        mime_type: MIME type override; guessed from the name when missing

    Returns:
        FileMetadata holding the file content
    """
    content = path.read_bytes()
    if not mime_type:
        mime_type = mimetypes.guess_type(path.name)[0] or DEFAULT_MIME_TYPE
    return FileMetadata(
        name=path.name,
        size=len(content),
        mime_type=mime_type,
        content=content
    )


def log_progress(progress: UploadProgress) -> None:
    logger.info(
        f"Asset {progress.asset_id}: {progress.completed_parts}/{progress.total_parts} parts, "
        f"{progress.bytes_uploaded}/{progress.total_bytes} bytes"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Upload a file through presigned multipart URLs"
    )
    parser.add_argument('file', type=Path,
                        help="Path of the file to upload")
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="Enable verbose logging")
    parser.add_argument('-c', '--config', type=Path,
                        help="Path to JSON config file")
    parser.add_argument('-m', '--mime', type=str,
                        help="MIME type of the file (guessed when omitted)")
    parser.add_argument('--max-concurrency', type=int,
                        help="Maximum number of parts in flight")
    parser.add_argument('--base-url', type=str,
                        help="Control plane base URL")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = load_config(
            args.config,
            env=os.environ,
            max_concurrency=args.max_concurrency,
            base_url=args.base_url,
        )
    except ConfigError as e:
        logger.error(str(e))
        return 1

    try:
        file = read_file(args.file, args.mime)
    except OSError as e:
        logger.error(f"Error reading {args.file}: {e}")
        return 1

    with UploadOrchestrator(config) as orchestrator:
        orchestrator.register_callback(log_progress)
        result = orchestrator.upload(file)

    if not result.success:
        logger.error(f"!!!! upload failed during {result.error.stage}: {result.error} !!!!")
        return 1

    logger.info(f"Uploaded {file.name} as asset {result.asset_id}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
