#!/usr/bin/env python3
"""
filemagic - Main CLI Application
"""
import argparse
import logging
import sys

from filemagic.base import MagicOption
from filemagic.config import get_config
from filemagic.errors import MagicError
from filemagic.session.file_magic import FileMagic

STDIN_MARKER = '-'


def collect_options(args):
    """Translate option switches into MagicOption members."""
    switches = [
        (args.symlink, MagicOption.SYMLINK),
        (args.compress, MagicOption.COMPRESS),
        (args.compress_transp, MagicOption.COMPRESS_TRANSP),
        (args.devices, MagicOption.DEVICES),
        (args.preserve_atime, MagicOption.PRESERVE_ATIME),
        (args.debug, MagicOption.DEBUG),
    ]
    return [option for enabled, option in switches if enabled]


def format_result(result) -> str:
    """Render a query result on one line."""
    if isinstance(result, (set, frozenset)):
        return '/'.join(sorted(result))
    return result


def query_command(args):
    """Handle describe, mime and extensions commands."""
    config = get_config()
    databases = args.magic_file or config.database_paths
    options = collect_options(args)

    try:
        session = FileMagic(*databases, library=args.library or None)
    except MagicError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    status = 0
    stdin_data = None
    with session:
        query = getattr(session, args.command)
        for name in args.files:
            if name == STDIN_MARKER:
                # stdin can only be consumed once
                if stdin_data is None:
                    stdin_data = sys.stdin.buffer.read()
                source = stdin_data
            else:
                source = name
            try:
                print(f"{name}: {format_result(query(source, *options))}")
            except MagicError as e:
                print(f"{name}: ERROR: {e}")
                status = 1

    return status


def version_command(args):
    """Handle version command."""
    try:
        with FileMagic(library=args.library or None) as session:
            version = session.version
    except (MagicError, NotImplementedError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"libmagic {version // 100}.{version % 100:02d}")
    return 0


def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="filemagic - identify file contents with libmagic"
    )
    parser.add_argument('--library', help='libmagic name or path (default: MAGIC_LIBRARY_NAME)')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Query commands share the same switches
    query_help = {
        'describe': 'Print a textual description',
        'mime': 'Print the MIME type and encoding',
        'extensions': 'Print plausible file extensions',
    }
    for command, help_text in query_help.items():
        query_parser = subparsers.add_parser(command, help=help_text)
        query_parser.add_argument('files', nargs='+', help="Files to inspect ('-' reads stdin)")
        query_parser.add_argument('--magic-file', '-m', action='append',
                                  help='Magic database to load (repeatable)')
        query_parser.add_argument('--symlink', '-L', action='store_true',
                                  help='Follow symlinks')
        query_parser.add_argument('--compress', '-z', action='store_true',
                                  help='Look inside compressed files')
        query_parser.add_argument('--compress-transp', '-Z', action='store_true',
                                  help='Look inside compressed files without reporting compression')
        query_parser.add_argument('--devices', '-s', action='store_true',
                                  help='Read block and character devices')
        query_parser.add_argument('--preserve-atime', '-p', action='store_true',
                                  help='Restore access time after reading')
        query_parser.add_argument('--debug', action='store_true',
                                  help='Print libmagic debugging output')

    subparsers.add_parser('version', help='Print the libmagic version')

    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=get_config().log_level.upper(),
        format='%(asctime)s %(name)s %(levelname)s %(message)s'
    )

    if not args.command:
        parser.print_help()
        return 1

    # Execute command
    if args.command == 'version':
        return version_command(args)
    return query_command(args)


if __name__ == '__main__':
    sys.exit(main())
