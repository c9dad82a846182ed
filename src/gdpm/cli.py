"""
Command-line interface for gdpm.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gdpm.config import GdpmConfig, default_config_paths, find_config_file, load_config
from gdpm.errors import ConfigError, GdpmError, format_error_chain
from gdpm.logging import setup_logging
from gdpm.packages.installer import BatchResult, PackageInstaller
from gdpm.packages.manifest import MANIFEST_FILE_NAME, ManifestStore
from gdpm.packages.models import PackageType

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Godot Package Manager",
        prog="gdpm",
    )

    # Global options
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (debug logging)",
    )
    parser.add_argument(
        "-C",
        "--project",
        default=None,
        help="Project root (defaults to the current directory)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # install
    install_parser = subparsers.add_parser(
        "install", help="Install a package, or every dependency when no name is given"
    )
    install_parser.add_argument("name", nargs="?", help="Package name")
    install_parser.add_argument(
        "--refresh-others",
        action="store_true",
        help="After installing, reinstall every other dependency in the manifest",
    )

    # uninstall
    uninstall_parser = subparsers.add_parser("uninstall", help="Uninstall a package")
    uninstall_parser.add_argument("name", help="Package name")

    # init
    init_parser = subparsers.add_parser("init", help="Create project/godot-package.json")
    init_parser.add_argument(
        "--addon",
        action="store_true",
        help="Mark this project as an addon package",
    )

    # config
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="config_command", help="Config commands")
    config_subparsers.add_parser("show", help="Show current configuration")
    config_init_parser = config_subparsers.add_parser("init", help="Initialize a new config file")
    config_init_parser.add_argument(
        "-o",
        "--output",
        default="gdpm.yaml",
        help="Output file path",
    )
    config_subparsers.add_parser("path", help="Show config file paths")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config()
    except ConfigError as e:
        _report_error("Failed to load config", e)
        sys.exit(1)

    if getattr(args, "verbose", False):
        setup_logging("DEBUG", file=config.log_file)
    else:
        setup_logging(config.log_level, file=config.log_file)

    if args.command == "install":
        code = cmd_install(args, config)
    elif args.command == "uninstall":
        code = cmd_uninstall(args, config)
    elif args.command == "init":
        code = cmd_init(args, config)
    elif args.command == "config":
        code = cmd_config(args, config)
    else:
        parser.print_help()
        code = 0

    if code:
        sys.exit(code)


def _create_installer(args: argparse.Namespace, config: GdpmConfig) -> PackageInstaller:
    root = Path(args.project) if getattr(args, "project", None) else Path.cwd()
    return PackageInstaller(project_root=root, config=config)


def _report_error(action: str, error: GdpmError) -> None:
    console.print(f"[red]✗ {action}:[/red] {escape(format_error_chain(error))}", highlight=False)


def _report_batch(result: BatchResult) -> int:
    table = Table(title="Installation summary")
    table.add_column("Package", style="cyan")
    table.add_column("Status")

    for name in result.installed:
        table.add_row(name, "[green]installed[/green]")
    for name, error in result.failed.items():
        table.add_row(name, f"[red]failed[/red]: {escape(str(error))}")

    console.print(table)
    console.print(
        f"\n📦 Installation complete: {len(result.installed)} installed, "
        f"{len(result.failed)} failed"
    )
    return 0 if result.ok else 1


def cmd_install(args: argparse.Namespace, config: GdpmConfig) -> int:
    """Install one package or every dependency."""
    installer = _create_installer(args, config)

    if not args.name:
        return _install_all(installer)

    console.print(f"Installing package: {args.name}")
    try:
        pkg, package_dir, key = installer.resolve(args.name)
        installer.install_package(pkg, package_dir, key=key)
        console.print(f"[green]✓[/green] Successfully installed {pkg.label}")

        if not args.refresh_others:
            return 0
        result = installer.install_other_dependencies(key)
    except GdpmError as e:
        _report_error("Failed to install package", e)
        return 1

    return _report_batch(result) if result.total else 0


def _install_all(installer: PackageInstaller) -> int:
    console.print("Installing all dependencies...")
    try:
        dependencies = list(installer.store.read().dependencies)
        if not dependencies:
            console.print("[yellow]⚠ No dependencies found in manifest[/yellow]")
            return 0

        console.print(f"Found {len(dependencies)} dependencies to install:")
        for name in dependencies:
            console.print(f"  - {name}")

        result = installer.install_all()
    except GdpmError as e:
        _report_error("Failed to read dependencies", e)
        return 1

    return _report_batch(result)


def cmd_uninstall(args: argparse.Namespace, config: GdpmConfig) -> int:
    """Uninstall a package."""
    installer = _create_installer(args, config)

    console.print(f"Uninstalling package: {args.name}")
    try:
        installer.uninstall(args.name)
    except GdpmError as e:
        _report_error("Failed to uninstall package", e)
        return 1

    console.print(f"[green]✓[/green] Successfully uninstalled {args.name}")
    return 0


def cmd_init(args: argparse.Namespace, config: GdpmConfig) -> int:
    """Create the project manifest."""
    root = Path(args.project) if getattr(args, "project", None) else Path.cwd()
    store = ManifestStore(root, schema_url=config.schema_url)

    console.print("Initializing gdpm manifest...")
    if store.exists():
        console.print(f"[yellow]⚠ {MANIFEST_FILE_NAME} already exists[/yellow]")
        return 0

    try:
        manifest = store.init(PackageType.ADDON if args.addon else None)
    except GdpmError as e:
        _report_error("Failed to initialize manifest", e)
        return 1

    console.print(f"[green]✓[/green] Created {MANIFEST_FILE_NAME} for project: {manifest.name}")
    return 0


def cmd_config(args: argparse.Namespace, config: GdpmConfig) -> int:
    """Configuration management commands."""
    if args.config_command == "show":
        return _config_show(config)
    if args.config_command == "init":
        return _config_init(args.output)
    if args.config_command == "path":
        return _config_path()
    console.print("[yellow]Usage: gdpm config <show|init|path>[/yellow]")
    return 0


def _config_show(config: GdpmConfig) -> int:
    """Show current configuration."""
    loaded_from = find_config_file()
    if loaded_from is None:
        console.print("[dim]No config file found. Using defaults.[/dim]")
    else:
        console.print(f"[dim]Loaded from: {loaded_from}[/dim]\n")

    console.print("[bold]Current Configuration:[/bold]\n")
    console.print(yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False))
    return 0


def _config_init(output: str) -> int:
    """Initialize a new config file."""
    output_path = Path(output)

    if output_path.exists():
        console.print(f"[red]File already exists: {output_path}[/red]")
        return 1

    with open(output_path, "w", encoding="utf-8") as f:
        yaml.dump(GdpmConfig().to_dict(), f, default_flow_style=False, sort_keys=False)

    console.print(f"[green]Created config file: {output_path}[/green]")
    return 0


def _config_path() -> int:
    """Show config file search paths."""
    console.print("[bold]Config file search paths:[/bold]\n")

    for path in default_config_paths():
        exists = "[green]✓[/green]" if path.exists() else "[dim]·[/dim]"
        console.print(f"  {exists} {path}")
    return 0


if __name__ == "__main__":
    main()
