"""
Command Line Interface for the photo album server.
"""

import argparse
import logging
import os
import sys
from dataclasses import replace
from typing import List, Optional

import bottle

from .cache_store import DiskCacheStore
from .config import AlbumConfig
from .generator import DerivedImageGenerator
from .lister import DirectoryLister
from .sweeper import CacheSweeper
from .transform import ImageTransformer
from .warmer import CacheWarmer
from .web import make_app


def setup_logging(config: AlbumConfig, verbose: bool = False) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        filename=config.log_file,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('PIL').setLevel(logging.WARNING)

    return logging.getLogger('album')


def load_config(args: argparse.Namespace, logger: logging.Logger) -> Optional[AlbumConfig]:
    """Get configuration from environment and CLI overrides."""
    config = AlbumConfig.from_env()

    if getattr(args, 'root', None):
        config = replace(config, image_root=args.root, cache_dir=os.getenv('THUMB_CACHE_DIR') or None)
    if getattr(args, 'cache_dir', None):
        config.cache_dir = args.cache_dir
    if getattr(args, 'host', None):
        config.host = args.host
    if getattr(args, 'port', None):
        config.port = args.port

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        return None
    config.ensure_dirs()
    return config


def build_generator(config: AlbumConfig, logger: logging.Logger) -> DerivedImageGenerator:
    return DerivedImageGenerator(
        image_root=config.image_root,
        store=DiskCacheStore(config.cache_dir, logger=logger),
        transformer=ImageTransformer(logger=logger),
        logger=logger,
    )


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP server."""
    logger = setup_logging(AlbumConfig.from_env(), args.verbose)
    config = load_config(args, logger)
    if config is None:
        return 1

    logger.info(f"Image root: {config.image_root}")
    logger.info(f"Cache: {config.cache_dir}")
    app = make_app(config, logger=logger)
    bottle.run(app, host=config.host, port=config.port, server=args.server, quiet=not args.verbose)
    return 0


def cmd_warm(args: argparse.Namespace) -> int:
    """Pre-render placeholders and thumbnails."""
    logger = setup_logging(AlbumConfig.from_env(), args.verbose)
    config = load_config(args, logger)
    if config is None:
        return 1

    warmer = CacheWarmer(
        lister=DirectoryLister(config.image_root, logger=logger),
        generator=build_generator(config, logger),
        width=args.size,
        dry_run=args.dry_run,
        logger=logger,
    )
    try:
        stats = warmer.warm(limit=args.limit)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    if not args.quiet:
        print()
        print(f"Cached: {stats.processed}")
        print(f"Errors: {stats.errors}")
        print(f"Time: {stats.elapsed_seconds:.1f}s")
        print(f"Rate: {stats.rate_per_minute:.1f}/min")

    return 0 if stats.errors == 0 else 1


def cmd_sweep(args: argparse.Namespace) -> int:
    """Remove orphaned cache entries."""
    logger = setup_logging(AlbumConfig.from_env(), args.verbose)
    config = load_config(args, logger)
    if config is None:
        return 1

    sweeper = CacheSweeper(
        lister=DirectoryLister(config.image_root, logger=logger),
        store=DiskCacheStore(config.cache_dir, logger=logger),
        dry_run=args.dry_run,
        logger=logger,
    )
    stats = sweeper.sweep()

    if not args.quiet:
        print(f"Scanned: {stats.scanned}")
        print(f"Removed: {stats.removed}")
        print(f"Kept: {stats.kept}")
    return 0


def add_location_arguments(parser: argparse.ArgumentParser) -> None:
    """Add image root / cache overrides to a parser."""
    parser.add_argument('--root', metavar='PATH', help='Override PHOTO_LIBRARY_LOCATION')
    parser.add_argument('--cache-dir', metavar='PATH', help='Override THUMB_CACHE_DIR')
    parser.add_argument(
        '-v', '--verbose', action='store_true', default=argparse.SUPPRESS, help='Enable verbose logging'
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='album',
        description='Photo album server with a derived-image cache',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  Serve:  python -m album serve --port 3000
  Warm:   python -m album warm --size 400
  Sweep:  python -m album sweep --dry-run

Configuration is read from PHOTO_LIBRARY_LOCATION, THUMB_CACHE_DIR, HOST,
PORT, MAX_UPLOAD_MB, LOG_LEVEL and LOG_FILE.
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    serve_parser = subparsers.add_parser('serve', help='Run the HTTP server')
    serve_parser.add_argument('--host', help='Override HOST')
    serve_parser.add_argument('--port', type=int, help='Override PORT')
    serve_parser.add_argument('--server', default='wsgiref', help='Bottle server adapter (default: wsgiref)')
    add_location_arguments(serve_parser)

    warm_parser = subparsers.add_parser('warm', help='Pre-render placeholders and thumbnails')
    warm_parser.add_argument('-s', '--size', type=int, default=400, help='Thumbnail width (default: 400)')
    warm_parser.add_argument('--limit', type=int, metavar='N', help='Limit to N files')
    warm_parser.add_argument('-n', '--dry-run', action='store_true', help='Show what would be done')
    warm_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress summary output')
    add_location_arguments(warm_parser)

    sweep_parser = subparsers.add_parser('sweep', help='Remove cache entries for changed or deleted files')
    sweep_parser.add_argument('-n', '--dry-run', action='store_true', help='Show what would be removed')
    sweep_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress summary output')
    add_location_arguments(sweep_parser)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'serve':
        return cmd_serve(parsed_args)
    elif parsed_args.command == 'warm':
        return cmd_warm(parsed_args)
    elif parsed_args.command == 'sweep':
        return cmd_sweep(parsed_args)

    return 1


if __name__ == '__main__':
    sys.exit(main())
