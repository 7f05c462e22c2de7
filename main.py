"""
NYSEG Bills - Main Entry Point

Command-line interface that turns a folder of NYSEG statements into one CSV
with a row per bill.

Architecture Overview:
┌──────────────────┐
│ Statement PDFs   │
└────────┬─────────┘
         │
         ▼
┌──────────────────────────────────────────────┐
│               EXTRACTION LAYER               │
│   Text layer in reading order                │
│   (pdfplumber, PyMuPDF fallback)             │
└────────────────────┬─────────────────────────┘
                     │
                     ▼
┌──────────────────────────────────────────────┐
│                PARSING LAYER                 │
│   Fallback chains ─ Reconciler ─ Assembler   │
│   Account identity (once per batch)          │
└────────────────────┬─────────────────────────┘
                     │
                     ▼
┌──────────────────────────────────────────────┐
│                OUTPUT LAYER                  │
│   CSV (fixed columns)  ·  JSON report        │
└──────────────────────────────────────────────┘
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click
from loguru import logger
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from output import CSVWriter, CSVConfig
from pipeline import BatchResult, BillPipeline, PipelineConfig, find_documents


DEFAULT_CONFIG = Path(__file__).parent / "config" / "settings.yaml"


# Configure logging
def setup_logging(verbose: bool = False, log_file: Optional[Path] = None):
    """Configure loguru logging."""
    # Remove default handler
    logger.remove()

    # Console logging
    log_level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=log_level,
        colorize=True
    )

    # File logging
    if log_file:
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            level="DEBUG",
            rotation="10 MB"
        )


def print_summary(batch: BatchResult, console: Console) -> None:
    """Print a table of extracted bills and any failures."""
    account = batch.account_info
    if not account.is_empty:
        console.print(f"[bold]Account:[/] {account.account_number or '-'}")
        console.print(f"[bold]Customer:[/] {account.customer_name or '-'}")
        console.print(f"[bold]Service address:[/] {account.service_address or '-'}")
        console.print()

    table = Table(title="Extracted Bills")

    table.add_column("Statement", style="cyan")
    table.add_column("Days", justify="right")
    table.add_column("kWh", justify="right")
    table.add_column("Therms", justify="right")
    table.add_column("Electric ($)", justify="right")
    table.add_column("Gas ($)", justify="right")
    table.add_column("Amount Due ($)", justify="right")
    table.add_column("Missing", justify="right")

    for bill in batch.bills:
        table.add_row(
            bill.statement_date.isoformat() if bill.statement_date else "N/A",
            str(bill.service_period.days),
            str(bill.electricity.usage),
            f"{bill.gas.usage_therms:.2f}",
            f"{bill.electricity.total_cost:.2f}",
            f"{bill.gas.total_cost:.2f}",
            f"{bill.amount_due:.2f}",
            str(len(bill.missing_fields)),
        )

    console.print()
    console.print(table)

    if batch.errors:
        console.print()
        console.print("[bold red]Failed documents:[/]")
        for error in batch.errors:
            console.print(f"  {error.file_name}: {error.error}")

    console.print()
    console.print(f"[bold green]Bills:[/] {len(batch.bills)}")
    console.print(f"[bold red]Failed:[/] {len(batch.errors)}")


def load_config(config_path: Optional[Path]) -> PipelineConfig:
    """Settings file given on the command line, else the bundled default."""
    if config_path is None and DEFAULT_CONFIG.exists():
        config_path = DEFAULT_CONFIG

    if config_path is None:
        return PipelineConfig()
    return PipelineConfig.from_yaml(config_path)


# CLI Interface
@click.command()
@click.option(
    '--input', '-i',
    'input_path',
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help='Statement PDF/.txt file or directory'
)
@click.option(
    '--output', '-o',
    'output_path',
    type=click.Path(path_type=Path),
    required=True,
    help='Output CSV file path'
)
@click.option(
    '--config', '-c',
    'config_path',
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help='Path to settings.yaml'
)
@click.option(
    '--backend',
    type=click.Choice(['pdfplumber', 'pymupdf']),
    default=None,
    help='PDF library to try first'
)
@click.option(
    '--workers',
    type=click.IntRange(min=1),
    default=None,
    help='Documents to read in parallel'
)
@click.option(
    '--recursive', '-r',
    is_flag=True,
    help='Search subdirectories'
)
@click.option(
    '--account-info/--no-account-info',
    'include_account_info',
    default=None,
    help='Include the account information block in the CSV'
)
@click.option(
    '--verbose', '-v',
    is_flag=True,
    help='Enable verbose logging'
)
@click.option(
    '--log-file',
    type=click.Path(path_type=Path),
    default=None,
    help='Write logs to file'
)
@click.option(
    '--json-report',
    type=click.Path(path_type=Path),
    default=None,
    help='Write extracted bills as JSON'
)
def main(
    input_path: Path,
    output_path: Path,
    config_path: Optional[Path],
    backend: Optional[str],
    workers: Optional[int],
    recursive: bool,
    include_account_info: Optional[bool],
    verbose: bool,
    log_file: Optional[Path],
    json_report: Optional[Path]
):
    """
    NYSEG Bills - Extract usage, rates and charges from NYSEG statements.

    Examples:

        # One statement
        python main.py -i statement.pdf -o bills.csv

        # A year of statements, four at a time
        python main.py -i ./statements/ -o bills.csv --workers 4

        # Text dumps instead of PDFs, with a JSON copy
        python main.py -i ./dumps/ -o bills.csv --json-report bills.json
    """
    setup_logging(verbose=verbose, log_file=log_file)

    console = Console()
    console.print("[bold blue]NYSEG Bill Extractor[/]")
    console.print()

    try:
        config = load_config(config_path)
    except (OSError, ValueError) as e:
        console.print(f"[bold red]Invalid configuration: {e}[/]")
        raise SystemExit(1)

    # Command line wins over the settings file
    if backend is not None:
        config.backend = backend
    if workers is not None:
        config.workers = workers
    if include_account_info is not None:
        config.include_account_info = include_account_info

    documents = find_documents(input_path, recursive=recursive)
    if not documents:
        console.print(f"[yellow]No PDF or .txt files found in {input_path}[/]")
        raise SystemExit(1)

    logger.info(f"Found {len(documents)} documents to process")
    pipeline = BillPipeline(config)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            console=console
        ) as progress:
            task = progress.add_task("Processing statements...", total=len(documents))

            def on_progress(done: int, total: int, file_name: str) -> None:
                progress.update(task, completed=done, description=f"Processed {file_name}")

            batch = pipeline.process_files(documents, progress_callback=on_progress)

    except KeyboardInterrupt:
        console.print("\n[yellow]Processing interrupted[/]")
        raise SystemExit(1)
    except RuntimeError as e:
        console.print(f"[bold red]Error: {e}[/]")
        if verbose:
            logger.exception("Full traceback:")
        raise SystemExit(1)

    if batch.bills:
        writer = CSVWriter(CSVConfig(include_account_info=config.include_account_info))
        writer.write(output_path, batch.bills, batch.account_info)
        console.print(f"[green]✓ Output written to: {output_path}[/]")
    else:
        console.print("[red]✗ No bills extracted[/]")

    if json_report:
        with open(json_report, 'w', encoding='utf-8') as f:
            json.dump(batch.to_dict(), f, indent=2)
        console.print(f"Report written to: {json_report}")

    print_summary(batch, console)

    if not batch.bills:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
