#!/usr/bin/env python3
"""
docbinder - Markdown content indexer and PDF binder

Main entry point for docbinder. This orchestrator coordinates indexing of the
content directory, checksum bookkeeping, and conversion of every document to
PDF followed by the merge into a single book.
"""

import logging
import sys
import argparse
from typing import Optional

from pydantic import ValidationError

from docbinder import __version__
from docbinder.config import ConfigManager
from docbinder.errors import DocBinderError
from docbinder.models import PipelineSummary
from docbinder.pipeline import BuildPipeline
from docbinder.state import ChecksumStore


def setup_logging(config: ConfigManager):
    """Configure logging for the application."""
    level = getattr(logging, config.get("logging.level", "INFO").upper())
    format_str = config.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    log_file = config.log_filename
    
    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file)
        ],
        force=True
    )


def create_pipeline(config: ConfigManager, args: argparse.Namespace) -> BuildPipeline:
    """
    Create the build pipeline from configuration, with command line overrides.
    
    Args:
        config: Loaded configuration
        args: Parsed command line arguments
        
    Returns:
        A pipeline ready to run
    """
    conversion_settings = config.conversion_settings
    concurrency: Optional[int] = getattr(args, "concurrency", None)
    if concurrency is not None:
        conversion_settings = conversion_settings.model_copy(update={"concurrency": concurrency})

    return BuildPipeline(
        content_root=getattr(args, "root", None) or config.content_root,
        index_path=getattr(args, "index", None) or config.index_file,
        pdf_dir=getattr(args, "output", None) or config.pdf_directory,
        merged_pdf=config.merged_pdf_path,
        index_settings=config.index_settings,
        conversion_settings=conversion_settings,
        clean_output=config.clean_output
    )


def print_summary(summary: PipelineSummary):
    """Print the final conversion report."""
    print("\n" + "="*60)
    print("PDF GENERATION COMPLETED")
    print("="*60)
    print(f"- Attempted: {summary.attempted}")
    print(f"- Succeeded: {summary.succeeded}")
    print(f"- Failed:    {summary.failed}")
    print(f"- Skipped:   {summary.skipped}")
    if summary.merged_path:
        print(f"\nAll documents merged into: {summary.merged_path}")


def run_index(config: ConfigManager, args: argparse.Namespace):
    """Generate the per-folder indexes and the root index."""
    pipeline = create_pipeline(config, args)
    tree = pipeline.run_indexing()
    documents = sum(1 for _ in tree.iter_files())
    logging.info(f"Indexed {len(tree.children)} folders with {documents} files into {pipeline.index_path}")


def run_checksums(config: ConfigManager, args: argparse.Namespace):
    """Recompute and persist the checksum store."""
    root = args.root or config.content_root
    store = ChecksumStore(args.store or config.checksum_file)
    store.update(root, config.index_settings.markdown_extension)


def run_pdf(config: ConfigManager, args: argparse.Namespace):
    """Convert every indexed document and merge the PDFs."""
    logging.info("Starting PDF generator")
    summary = create_pipeline(config, args).run_conversion()
    print_summary(summary)


def run_build(config: ConfigManager, args: argparse.Namespace):
    """Index the content root, then convert it."""
    logging.info("Starting full build")
    summary = create_pipeline(config, args).run()
    print_summary(summary)


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="docbinder - index Markdown content and bind it into PDFs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py index                          # Write index.json files and the root index
  python main.py checksums                      # Rewrite the checksum store
  python main.py pdf --concurrency 2            # Render PDFs from the root index
  python main.py build --root out/blogs         # Index, then render and merge
        """
    )
    
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to the configuration file (default: config.yaml)"
    )
    
    parser.add_argument(
        "--version",
        action="version",
        version=f"docbinder {__version__}"
    )
    
    subparsers = parser.add_subparsers(dest="command", required=True)
    
    index_parser = subparsers.add_parser("index", help="Generate index files for the content root")
    index_parser.add_argument("--root", help="Content directory (default: paths.content_root)")
    index_parser.add_argument("--index", help="Root index output path (default: paths.index_file)")
    index_parser.set_defaults(handler=run_index)
    
    checksum_parser = subparsers.add_parser("checksums", help="Update the checksum store")
    checksum_parser.add_argument("--root", help="Content directory (default: paths.content_root)")
    checksum_parser.add_argument("--store", help="Checksum file (default: paths.checksum_file)")
    checksum_parser.set_defaults(handler=run_checksums)
    
    for name, handler, help_text in (
        ("pdf", run_pdf, "Render PDFs from the root index and merge them"),
        ("build", run_build, "Index the content root, then render and merge PDFs"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--root", help="Content directory (default: paths.content_root)")
        sub.add_argument("--index", help="Root index path (default: paths.index_file)")
        sub.add_argument("--output", help="PDF output directory (default: paths.pdf_dir)")
        sub.add_argument("--concurrency", type=positive_int, help="Documents rendered at once (default: conversion.concurrency)")
        sub.set_defaults(handler=handler)
    
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_arguments(argv)
    config = ConfigManager(args.config)
    setup_logging(config)
    
    logging.info(f"docbinder {__version__} - {args.command}")
    
    try:
        args.handler(config, args)
        
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        print("\nInterrupted.")
        sys.exit(130)
        
    except DocBinderError as e:
        logging.error(f"{args.command} failed: {e}")
        print(f"\n{args.command} failed: {e}", file=sys.stderr)
        sys.exit(1)
        
    except ValidationError as e:
        logging.error(f"Invalid configuration: {e}")
        print(f"\nInvalid configuration: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
