"""
CLI entry point for platformcli.

Usage:
    platformcli build [source]             Build the project's applications locally
    platformcli ssh-key:delete <id>        Delete an SSH key
    platformcli variable:get [name]        View variable(s) for an environment
"""

import argparse
import logging
import subprocess
import sys
from pathlib import Path

from .api import ApiError, create_client
from .config import CliConfig, ConfigurationError
from .local import create_local_build
from .local.toolstack import BuildSettings, ToolstackKind

logger = logging.getLogger(__name__)


def cmd_build(args, config):
    """Build the project's applications locally."""
    source_dir = Path(args.source).absolute()
    if not source_dir.is_dir():
        raise ConfigurationError(f"Source directory not found: {source_dir}")

    settings = BuildSettings(copy=args.copy, absolute_links=args.abslinks)
    builder = create_local_build(config, settings, toolstack=args.toolstack)
    build_dirs = builder.build(source_dir, args.destination)

    for build_dir in build_dirs:
        print(build_dir)
    return 0


def cmd_ssh_key_delete(args, config):
    """Delete an SSH key."""
    key_id = args.id
    if not key_id or not key_id.isdigit():
        print("You must specify the ID of the SSH key to delete.", file=sys.stderr)
        print(f"List your SSH keys with: {config.get('application.executable')} ssh-keys", file=sys.stderr)
        return 1

    client = create_client(config)
    key = client.get_ssh_key(int(key_id))
    if key is None:
        print(f"SSH key not found: {key_id}", file=sys.stderr)
        return 1

    client.delete_ssh_key(key.key_id)
    print(f"The SSH key {key_id} has been deleted from your {config.get('service.name')} account.", file=sys.stderr)
    return 0


def cmd_variable_get(args, config):
    """View variable(s) for an environment."""
    if args.pipe and not args.name:
        raise ConfigurationError("Specify a variable name to use --pipe")
    if not args.project or not args.environment:
        raise ConfigurationError("A project and an environment are required (--project, --environment)")

    client = create_client(config)

    if args.name:
        variable = client.get_variable(args.project, args.environment, args.name)
        if variable is None:
            print(f"Variable not found: {args.name}", file=sys.stderr)
            return 1
        if args.pipe:
            print(variable.value)
        else:
            print(f"{variable.name}: {variable.value}")
        return 0

    variables = client.get_variables(args.project, args.environment)
    if not variables:
        print("No variables found", file=sys.stderr)
        return 1

    print("ID\tValue\tInherited\tJSON")
    for variable in variables:
        print("\t".join([
            variable.id,
            variable.value,
            "Yes" if variable.inherited else "No",
            "Yes" if variable.is_json else "No",
        ]))
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog="platformcli",
        description="Manage cloud application deployments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    platformcli build --copy
    platformcli ssh-key:delete 123
    platformcli variable:get example -p myproject -e main
"""
    )
    parser.add_argument('--version', action='version', version='platformcli 0.1.0')
    parser.add_argument('--config', type=Path, help='Path to a YAML config file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Show debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # build
    build_p = subparsers.add_parser('build', help='Build the project locally')
    build_p.add_argument('source', nargs='?', default='.', help='Project source directory')
    build_p.add_argument('--copy', action='store_true', help='Copy files instead of symlinking them')
    build_p.add_argument('--abslinks', action='store_true', help='Use absolute links')
    build_p.add_argument('-d', '--destination', type=Path, help='Web root link to create (default: <source>/_www)')
    build_p.add_argument(
        '--toolstack',
        choices=[kind.value for kind in ToolstackKind],
        help='Toolstack to build with (default: from the app config, or none)',
    )
    build_p.set_defaults(func=cmd_build)

    # ssh-key:delete
    ssh_p = subparsers.add_parser('ssh-key:delete', help='Delete an SSH key')
    ssh_p.add_argument('id', nargs='?', help='The ID of the SSH key to delete')
    ssh_p.set_defaults(func=cmd_ssh_key_delete)

    # variable:get
    var_p = subparsers.add_parser(
        'variable:get',
        aliases=['variables', 'vget', 'variable:list'],
        help='View variable(s) for an environment',
    )
    var_p.add_argument('name', nargs='?', help='The name of the variable')
    var_p.add_argument('--pipe', action='store_true', help='Output the full variable value only (a "name" must be specified)')
    var_p.add_argument('-p', '--project', help='The project ID')
    var_p.add_argument('-e', '--environment', help='The environment ID')
    var_p.set_defaults(func=cmd_variable_get)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = CliConfig(args.config)
        return args.func(args, config)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ApiError as e:
        print(f"API error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except subprocess.CalledProcessError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
