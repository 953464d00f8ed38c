"""
Command Line Interface for album upload, deletion and inspection.
"""

import argparse
import logging
import signal
from typing import List, Optional

import urllib3

from .deleter import AlbumDeleter
from .errors import GalleryError, ImageError, IngestError, InputError, NotFoundError
from .ingest_config import IngestConfig
from .ingest_progress import IngestProgress
from .ingestor import Ingestor
from .reader import GalleryReader
from .reporter import Reporter
from .s3_client import S3Client
from .s3_config import S3Config
from .sources import collect_sources


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)

    return logging.getLogger('filmgallery')


def get_s3_config(args: argparse.Namespace) -> S3Config:
    """Get S3 configuration from environment and CLI overrides."""
    config = S3Config.from_env()

    if getattr(args, 'bucket', None):
        config.bucket = args.bucket
    if getattr(args, 's3_endpoint', None):
        config.endpoint = args.s3_endpoint
    if getattr(args, 's3_access_key', None):
        config.access_key = args.s3_access_key
    if getattr(args, 's3_secret_key', None):
        config.secret_key = args.s3_secret_key
    if getattr(args, 's3_region', None):
        config.region = args.s3_region
    if getattr(args, 'no_verify_ssl', False):
        config.verify_ssl = False

    return config


def get_store(args: argparse.Namespace, logger: logging.Logger) -> Optional[S3Client]:
    """Build the S3 client, or log why the configuration is unusable."""
    config = get_s3_config(args)
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        return None

    if not config.verify_ssl:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    logger.info(f"Storage: S3 bucket {config.bucket}" + (f" at {config.endpoint}" if config.endpoint else ""))
    return S3Client(config, logger)


def add_storage_arguments(parser: argparse.ArgumentParser) -> None:
    """Add storage configuration arguments to a parser."""
    s3_group = parser.add_argument_group('S3 Storage')
    s3_group.add_argument('-b', '--bucket', help='Bucket name (default: GALLERY_BUCKET)')
    s3_group.add_argument('--s3-endpoint', help='Override S3_ENDPOINT')
    s3_group.add_argument('--s3-access-key', help='Override S3_ACCESS_KEY')
    s3_group.add_argument('--s3-secret-key', help='Override S3_SECRET_KEY')
    s3_group.add_argument('--s3-region', help='Override S3_REGION')
    s3_group.add_argument('--no-verify-ssl', action='store_true', help='Skip TLS certificate checks')


def get_ingest_config(args: argparse.Namespace) -> IngestConfig:
    """Build ingestion settings from CLI arguments."""
    config = IngestConfig(
        fail_fast=args.fail_fast,
        sort_by_capture_time=args.sort_by_capture_time,
        quality=args.quality,
        strip_metadata=not args.keep_metadata,
    )
    if args.render_workers:
        config.render_workers = args.render_workers
    if args.upload_workers:
        config.upload_workers = args.upload_workers
    return config


def cmd_upload(args: argparse.Namespace) -> int:
    """Execute upload command."""
    logger = setup_logging(args.verbose)
    reporter = Reporter()

    try:
        sources = collect_sources(args.paths)
    except InputError as e:
        logger.error(str(e))
        reporter.report_upload_failure(str(e))
        return 1

    if not sources:
        logger.error("No images found in the provided paths")
        reporter.report_upload_failure("No images found in the provided paths")
        return 1

    store = get_store(args, logger)
    if store is None:
        return 1

    ingestor = Ingestor(store, config=get_ingest_config(args), logger=logger)
    progress = None
    if not args.quiet:
        progress = IngestProgress(show_files=args.show_files, logger=logger)

    logger.info(f"Album: {args.name}")
    logger.info(f"Images found: {len(sources)}")

    previous_handler = signal.signal(signal.SIGTERM, lambda signum, frame: ingestor.stop())
    try:
        result = ingestor.upload(args.name, sources, progress=progress)
    except KeyboardInterrupt:
        logger.info("Interrupted by user; no manifest was written")
        return 130
    except IngestError as e:
        logger.error(f"Upload failed: {e}")
        reporter.report_upload_failure(str(e), e.stats)
        return 1
    except ImageError as e:
        logger.error(f"Upload aborted (fail-fast): {e}")
        reporter.report_upload_failure(str(e))
        return 1
    except GalleryError as e:
        logger.error(f"Upload failed: {e}")
        reporter.report_upload_failure(str(e))
        return 1
    finally:
        signal.signal(signal.SIGTERM, previous_handler)

    if not args.quiet:
        print()
    reporter.report_upload(result)
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    """Execute delete command."""
    logger = setup_logging(args.verbose)

    store = get_store(args, logger)
    if store is None:
        return 1

    try:
        result = AlbumDeleter(store, logger).delete(args.album_id)
    except GalleryError as e:
        logger.error(f"Delete failed: {e}")
        return 1

    Reporter().report_delete(result)
    return 0 if result.complete else 1


def cmd_show(args: argparse.Namespace) -> int:
    """Execute show command."""
    logger = setup_logging(args.verbose)

    store = get_store(args, logger)
    if store is None:
        return 1

    try:
        album = GalleryReader(store, logger).load_album(args.album_id)
    except NotFoundError:
        print(f"Album not found: {args.album_id}")
        return 1
    except GalleryError as e:
        logger.error(f"Show failed: {e}")
        return 1

    Reporter().report_album(album)
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Execute serve command."""
    from bottle import run

    from .web import create_app

    logger = setup_logging(args.verbose)

    store = get_store(args, logger)
    if store is None:
        return 1

    app = create_app(GalleryReader(store, logger), logger)
    run(app, host=args.host, port=args.port, quiet=not args.verbose)
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='filmgallery',
        description='Private web albums stored in an S3-compatible bucket',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Workflow:
  Upload: python -m filmgallery upload ./roll-12 --name "Roll 12" --bucket photos
  Show:   python -m filmgallery show <album-id> --bucket photos
  Delete: python -m filmgallery delete <album-id> --bucket photos
  Serve:  python -m filmgallery serve --bucket photos --port 3000

Each upload creates a new album with a fresh id; re-run a failed upload
rather than resuming it.
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Upload command
    upload_parser = subparsers.add_parser('upload', help='Upload images as a new album')
    upload_parser.add_argument('paths', nargs='+', help='Image files or directories')
    upload_parser.add_argument('-n', '--name', required=True, help='Album name')
    upload_parser.add_argument('--fail-fast', action='store_true',
                               help='Abort the album if any image fails (default: skip it)')
    upload_parser.add_argument('--sort-by-capture-time', action='store_true',
                               help='Order images by EXIF capture time instead of path')
    upload_parser.add_argument('--quality', type=int, default=92, help='JPEG quality (default: 92)')
    upload_parser.add_argument('--keep-metadata', action='store_true',
                               help='Store plain upright JPEG originals unchanged, EXIF included')
    upload_parser.add_argument('--render-workers', type=int, metavar='N',
                               help='Parallel decode/encode workers (default: CPU count)')
    upload_parser.add_argument('--upload-workers', type=int, metavar='N',
                               help='Parallel upload workers (default: 8)')
    upload_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress progress output')
    upload_parser.add_argument('--show-files', action='store_true',
                               help='Print each file as it is stored or skipped')
    upload_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(upload_parser)

    # Delete command
    delete_parser = subparsers.add_parser('delete', help='Delete an album')
    delete_parser.add_argument('album_id', help='Album ID to delete')
    delete_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(delete_parser)

    # Show command
    show_parser = subparsers.add_parser('show', help='Print the contents of an album')
    show_parser.add_argument('album_id', help='Album ID to show')
    show_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(show_parser)

    # Serve command
    serve_parser = subparsers.add_parser('serve', help='Serve albums over HTTP')
    serve_parser.add_argument('--host', default='127.0.0.1', help='Bind address (default: 127.0.0.1)')
    serve_parser.add_argument('-p', '--port', type=int, default=3000, help='Port (default: 3000)')
    serve_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(serve_parser)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'upload':
        return cmd_upload(parsed_args)
    elif parsed_args.command == 'delete':
        return cmd_delete(parsed_args)
    elif parsed_args.command == 'show':
        return cmd_show(parsed_args)
    elif parsed_args.command == 'serve':
        return cmd_serve(parsed_args)

    return 1
