"""
Command-line interface for crosstype.

Provides the ``generate``, ``languages`` and ``info`` commands.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.syntax import Syntax
from rich.table import Table

from . import __version__
from .codegen import (
    GenerationResult,
    generate_code,
    get_generator,
    get_language_info,
    get_registry,
    list_all_language_info,
)
from .codegen.core.config import (
    EXAMPLE_CONFIGS,
    IDENTIFIER_CASES,
    ConfigError,
    get_config_manager,
    load_config,
)
from .codegen.core.ir import GraphFormatError, TypeGraph
from .codegen.registry import RegistryError
from .logging_config import configure_logging, get_logger
from .utils import JSONLoaderError, load_type_graph

logger = get_logger(__name__)

# Initialize rich console
console = Console()

# Lexer names rich.syntax knows the targets by
_SYNTAX_NAMES = {"python": "python", "go": "go"}


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="crosstype",
        description="Generate wire-compatible type declarations from a type graph",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  crosstype generate types.json -l python -l go -o generated/
  crosstype generate https://example.com/types.json -l go --package-name models
  crosstype languages
  crosstype info go
        """.strip(),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command")

    generate = subparsers.add_parser("generate", help="Generate code from a type graph")
    generate.add_argument("graph", help="Type graph JSON file or URL")
    generate.add_argument(
        "--language",
        "-l",
        action="append",
        dest="languages",
        metavar="LANGUAGE",
        help="Target language, repeat for several targets (default: every language)",
    )
    generate.add_argument(
        "--output",
        "-o",
        metavar="DIR",
        help="Directory to write generated files to (default: stdout)",
    )
    generate.add_argument("--config", metavar="FILE", help="JSON configuration file")
    generate.add_argument("--package-name", "--package", help="Package/namespace name")
    generate.add_argument(
        "--struct-case",
        choices=sorted(IDENTIFIER_CASES),
        help="Naming case for types",
    )
    generate.add_argument(
        "--field-case",
        choices=sorted(IDENTIFIER_CASES),
        help="Naming case for fields",
    )
    generate.add_argument(
        "--no-constructors",
        action="store_true",
        help="Don't generate tagged union constructors",
    )
    generate.add_argument(
        "--no-comments",
        action="store_true",
        help="Don't carry doc comments into the generated code",
    )
    generate.add_argument(
        "--verbose",
        action="store_true",
        help="Show generation result metadata",
    )
    generate.set_defaults(func=_handle_generate)

    languages = subparsers.add_parser("languages", help="List supported target languages")
    languages.set_defaults(func=_handle_languages)

    info = subparsers.add_parser("info", help="Show details about a target language")
    info.add_argument("language", help="Language name or alias")
    info.set_defaults(func=_handle_info)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point of the ``crosstype`` command.

    Args:
        argv: Arguments without the program name; defaults to ``sys.argv[1:]``.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except CLIError as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1


# Commands


def _handle_generate(args: argparse.Namespace) -> int:
    """Generate every requested target, writing or printing the results."""
    graph = _load_graph(args.graph)
    languages = args.languages or get_registry().list_languages()

    results: dict[str, GenerationResult] = {}
    configs: dict[str, Any] = {}

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        for language in languages:
            task = progress.add_task(f"[green]Generating {language} code...", total=None)
            try:
                config = _build_config(args, language)
                generator = get_generator(language, config)
            except (RegistryError, ConfigError) as e:
                logger.error(f"{language}: {e}")
                results[language] = GenerationResult.error(str(e), exception=e)
            else:
                configs[language] = config
                results[language] = generate_code(generator, graph)
            progress.remove_task(task)

    failed = False
    for language, result in results.items():
        if not result.success:
            failed = True
            console.print(f"[red]✗ {language}:[/red] {result.error_message}")
            continue

        if args.output:
            if not _write_output(result, configs[language], Path(args.output)):
                failed = True
        else:
            _print_code(language, result)

        if args.verbose:
            _print_metadata(result)
        _print_warnings(result)

    return 1 if failed else 0


def _handle_languages(args: argparse.Namespace) -> int:
    """List supported languages with details."""
    language_info = list_all_language_info()

    table = Table(title="📋 Supported Languages", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Language", style="bold green", no_wrap=True)
    table.add_column("Extension", style="cyan")
    table.add_column("Generator Class", style="dim")
    table.add_column("Aliases", style="blue")

    for lang_name, info in sorted(language_info.items()):
        aliases = ", ".join(info["aliases"]) if info["aliases"] else "[dim]none[/dim]"
        table.add_row(lang_name, info["file_extension"], info["class"], aliases)

    console.print()
    console.print(table)
    console.print()
    console.print(
        Panel(
            "[bold]Usage:[/bold] crosstype generate [dim]types.json[/dim] -l [cyan]LANGUAGE[/cyan]\n"
            "[bold]Info:[/bold] crosstype info [cyan]LANGUAGE[/cyan]",
            title="💡 Quick Start",
            border_style="blue",
        )
    )
    return 0


def _handle_info(args: argparse.Namespace) -> int:
    """Show detailed information about a specific language."""
    try:
        info = get_language_info(args.language)
    except RegistryError as e:
        console.print(f"[red]✗[/red] {e}")
        console.print("[dim]Use 'crosstype languages' to see available options[/dim]")
        return 1

    info_text = (
        f"[bold]Language:[/bold] {info['name']}\n"
        f"[bold]File Extension:[/bold] {info['file_extension']}\n"
        f"[bold]Generator Class:[/bold] {info['class']}\n"
        f"[bold]Module:[/bold] {info['module']}"
    )
    if info["aliases"]:
        info_text += f"\n[bold]Aliases:[/bold] {', '.join(info['aliases'])}"

    console.print()
    console.print(Panel(info_text, title=f"🔧 {info['name'].title()} Generator", border_style="green"))

    config = load_config(info["name"])
    config_table = Table(
        title="⚙️  Default Configuration",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    config_table.add_column("Setting", style="bold")
    config_table.add_column("Value", style="green")

    for key in ("package_name", "module_name", "struct_case", "field_case", "constant_case"):
        config_table.add_row(key, str(getattr(config, key)))
    config_table.add_row("generate_constructors", str(config.generate_constructors))
    for key, value in sorted(config.custom.items()):
        config_table.add_row(key, str(value))

    console.print(config_table)

    example = EXAMPLE_CONFIGS.get(info["name"])
    if example:
        console.print(
            Panel(
                Syntax(json.dumps(example, indent=2), "json", theme="monokai"),
                title="💡 Example --config file",
                border_style="blue",
            )
        )
    return 0


# Helpers


def _load_graph(source: str) -> TypeGraph:
    try:
        return load_type_graph(source)
    except FileNotFoundError as e:
        raise CLIError(str(e)) from e
    except JSONLoaderError as e:
        raise CLIError(f"Could not load type graph: {e}") from e
    except GraphFormatError as e:
        raise CLIError(f"Malformed type graph: {e}") from e


def _build_config(args: argparse.Namespace, language: str):
    """Merge defaults, the config file and command-line overrides for one target."""
    overrides: dict[str, Any] = {}

    if args.package_name:
        overrides["package_name"] = args.package_name
    if args.struct_case:
        overrides["struct_case"] = args.struct_case
    if args.field_case:
        overrides["field_case"] = args.field_case
    if args.no_constructors:
        overrides["generate_constructors"] = False
    if args.no_comments:
        overrides["add_comments"] = False

    primary = get_registry().resolve(language)
    config = load_config(primary, overrides, args.config)

    for warning in get_config_manager().validate_config(config, primary):
        logger.warning(f"{primary}: {warning}")
    return config


def _write_output(result: GenerationResult, config, output_dir: Path) -> bool:
    file_name = config.output_file or f"{config.module_name}{result.metadata['file_extension']}"
    output_path = output_dir / file_name
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path.write_text(result.code, encoding="utf-8")
    except OSError as e:
        console.print(f"[red]✗ Failed to write to {output_path}:[/red] {e}")
        return False

    console.print(
        f"[green]✓[/green] Generated {result.metadata['language']} code saved to "
        f"[cyan]{output_path}[/cyan]"
    )
    return True


def _print_code(language: str, result: GenerationResult):
    name = result.metadata.get("language", language)
    border = "═" * 30
    console.print(f"[green]{border} 📄 Generated {name.title()} Code {border}[/green]\n")
    console.print(Syntax(result.code, _SYNTAX_NAMES.get(name, name), theme="monokai"))
    console.print()


def _print_metadata(result: GenerationResult):
    metadata_table = Table(
        title="📊 Generation Metadata",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    metadata_table.add_column("Property", style="bold")
    metadata_table.add_column("Value", style="green")

    for key, value in result.metadata.items():
        metadata_table.add_row(key.replace("_", " ").title(), str(value))

    console.print(metadata_table)


def _print_warnings(result: GenerationResult):
    if not result.warnings:
        return
    console.print("[yellow]⚠️  Warnings:[/yellow]")
    for warning in result.warnings:
        console.print(f"  [yellow]•[/yellow] {warning}")
    console.print()


if __name__ == "__main__":
    sys.exit(main())
