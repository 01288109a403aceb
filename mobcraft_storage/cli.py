"""
Command-line interface for Mobcraft Storage SDK.

A thin front end over MobcraftStorage: it reads and writes local files,
renders models with rich, and turns MobcraftError into a non-zero exit.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .client import MobcraftStorage
from .config import CONFIG_FILE, DEFAULT_BASE_URL, load_config_file, save_config_file
from .exceptions import MobcraftError
from .utils import sanitize_file_name

# Initialize Rich console
console = Console()


class CLIContext:
    """CLI context object to share state between commands."""

    def __init__(self, config_file: Path = CONFIG_FILE):
        self.client: Optional[MobcraftStorage] = None
        self.config: Dict[str, Any] = {}
        self.config_file = config_file

    def load_config(self):
        """Load configuration from file."""
        self.config = load_config_file(self.config_file)

    def save_config(self):
        """Save configuration to file."""
        save_config_file(self.config, self.config_file)

    def get_client(self) -> MobcraftStorage:
        """Get authenticated client; environment variables fill unset values."""
        if self.client is None:
            self.client = MobcraftStorage(
                api_key=self.config.get("api_key"),
                base_url=self.config.get("base_url"),
            )
        return self.client


# Create CLI context
cli_context = CLIContext()


def _fail(action: str, error: Exception):
    console.print(f"❌ {action} failed: {escape(str(error))}")
    sys.exit(1)


def _print_json(data: Any):
    console.print_json(json.dumps(data, default=str))


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging of HTTP calls")
@click.pass_context
def cli(ctx, debug):
    """Mobcraft Storage CLI - manage files, quota and tiers."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug

    cli_context.load_config()

    if debug:
        logging.basicConfig(level=logging.DEBUG)
        console.print("[dim]Debug mode enabled[/dim]")


@cli.command()
@click.option("--api-key", prompt=True, hide_input=True, help="API key for authentication")
@click.option("--base-url", default=DEFAULT_BASE_URL, help="Mobcraft Storage API root URL")
def config(api_key, base_url):
    """Save credentials and settings to the config file."""
    cli_context.config.update({"api_key": api_key, "base_url": base_url})
    cli_context.save_config()
    console.print(f"✅ Configuration saved to {cli_context.config_file}")


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--folder", "-f", default="/", help="Destination folder")
@click.option("--mime-type", help="Override MIME type detection")
@click.option("--metadata", help="JSON metadata for the files")
def upload(files, folder, mime_type, metadata):
    """Upload files to Mobcraft Storage."""
    try:
        metadata_dict = json.loads(metadata) if metadata else None
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--metadata")

    try:
        client = cli_context.get_client()
        for file_path in files:
            with console.status(f"Uploading {file_path.name}..."):
                result = client.upload_bytes(
                    file_path.read_bytes(),
                    file_path.name,
                    folder=folder,
                    mime_type=mime_type,
                    metadata=metadata_dict,
                )
            console.print(
                f"✅ Uploaded: {result.file_name} ({result.file_size_formatted}, ID: {result.file_id})"
            )
    except (MobcraftError, ValueError) as e:
        _fail("Upload", e)


@cli.command()
@click.argument("file_id")
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Output file path")
def download(file_id, output):
    """Download a file from Mobcraft Storage."""
    try:
        client = cli_context.get_client()
        file_record = client.get_file(file_id)
        with console.status(f"Downloading {file_record.file_name}..."):
            content = client.download_file(file_id)
    except (MobcraftError, ValueError) as e:
        _fail("Download", e)

    # Server-supplied names must not escape the target directory
    local_name = sanitize_file_name(file_record.file_name)
    local_path = output or Path(local_name)
    if local_path.is_dir():
        local_path = local_path / local_name
    local_path.write_bytes(content)
    console.print(f"✅ Downloaded: {local_path}")


@cli.command(name="list")
@click.option("--folder", "-f", help="Only list files in this folder")
@click.option("--limit", "-l", default=20, show_default=True, help="Maximum number of files to list")
@click.option("--offset", "-o", default=0, help="Number of files to skip")
@click.option("--sort-by", default="created_at", show_default=True, help="Field to sort by")
@click.option("--sort-order", type=click.Choice(["asc", "desc"]), default="desc", show_default=True)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def list_files(folder, limit, offset, sort_by, sort_order, output_json):
    """List files in Mobcraft Storage."""
    try:
        client = cli_context.get_client()
        page = client.list_files(folder, limit, offset, sort_by, sort_order)
    except (MobcraftError, ValueError) as e:
        _fail("Listing files", e)

    if output_json:
        _print_json(page.to_dict(lambda item: item.to_dict()))
        return

    if page.is_empty:
        console.print("No files found.")
        return

    table = Table(title=f"Files (page {page.current_page}/{page.total_pages}, {page.total} total)")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Size", style="yellow")
    table.add_column("Type", style="blue")
    table.add_column("Folder")
    table.add_column("Created", style="magenta")

    for file in page:
        table.add_row(
            file.id,
            file.file_name,
            file.file_size_formatted,
            file.mime_type or "unknown",
            file.folder,
            file.created_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)
    if page.has_more:
        console.print(f"[dim]More files available: --offset {page.next_offset}[/dim]")


@cli.command()
@click.argument("file_id")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(file_id, output_json):
    """Get detailed information about a file."""
    try:
        file_record = cli_context.get_client().get_file(file_id)
    except (MobcraftError, ValueError) as e:
        _fail("Getting file info", e)

    if output_json:
        _print_json(file_record.to_dict())
        return

    table = Table(title=f"File Information: {file_record.file_name}")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("ID", file_record.id)
    table.add_row("Filename", file_record.file_name)
    table.add_row("Size", file_record.file_size_formatted)
    table.add_row("MIME Type", file_record.mime_type or "unknown")
    table.add_row("Folder", file_record.folder)
    table.add_row("Created", file_record.created_at.strftime("%Y-%m-%d %H:%M:%S"))
    if file_record.expires_at:
        table.add_row("Expires", file_record.expires_at.strftime("%Y-%m-%d %H:%M:%S"))
    if file_record.metadata:
        table.add_row("Metadata", json.dumps(file_record.to_dict()["metadata"], indent=2))

    console.print(table)


@cli.command()
@click.argument("file_id")
@click.confirmation_option(prompt="Are you sure you want to delete this file?")
def delete(file_id):
    """Delete a file from Mobcraft Storage."""
    try:
        cli_context.get_client().delete_file(file_id)
    except (MobcraftError, ValueError) as e:
        _fail("Delete", e)
    console.print(f"✅ Deleted: {file_id}")


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def quota(output_json):
    """Show storage quota and usage."""
    try:
        status = cli_context.get_client().get_quota()
    except (MobcraftError, ValueError) as e:
        _fail("Getting quota", e)

    if output_json:
        _print_json(status.to_dict())
        return

    table = Table(title=f"Quota ({status.tier})")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Used", f"{status.storage_used_formatted} / {status.storage_limit_formatted}")
    table.add_row("Usage", f"{status.storage_percentage:.0f}%")
    table.add_row("Files", str(status.files_count))
    table.add_row("Max file size", status.file_size_limit_formatted)
    table.add_row("Features", ", ".join(status.features) or "-")
    if status.subscription_expires_at:
        table.add_row("Renews", status.subscription_expires_at.strftime("%Y-%m-%d"))
    console.print(table)

    if status.is_full:
        console.print("[red]Storage is full.[/red]")
    elif status.is_almost_full:
        console.print("[yellow]Storage is almost full.[/yellow]")


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def breakdown(output_json):
    """Show storage usage by file category."""
    try:
        usage = cli_context.get_client().get_usage_breakdown()
    except (MobcraftError, ValueError) as e:
        _fail("Getting usage breakdown", e)

    if output_json:
        _print_json(usage.to_dict())
        return

    table = Table(title=f"Usage: {usage.total_size_formatted} in {usage.total_files} files")
    table.add_column("Category", style="cyan")
    table.add_column("Size", style="yellow")
    table.add_column("Files")
    table.add_column("Share", style="green")
    for name, category in usage.categories.items():
        table.add_row(name, category.size_formatted, str(category.count), f"{category.percentage:.1f}%")
    console.print(table)


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def tiers(output_json):
    """List the available pricing tiers."""
    try:
        offerings = cli_context.get_client().get_tiers()
    except (MobcraftError, ValueError) as e:
        _fail("Getting tiers", e)

    if output_json:
        _print_json([tier.to_dict() for tier in offerings])
        return

    table = Table(title="Tiers")
    table.add_column("Name", style="cyan")
    table.add_column("Price", style="green")
    table.add_column("Storage", style="yellow")
    table.add_column("Max file size")
    table.add_column("Features")
    for tier in offerings:
        name = tier.name
        if tier.is_current:
            name += " (current)"
        elif tier.is_popular:
            name += " ★"
        table.add_row(
            name,
            tier.price_formatted,
            tier.storage_limit_formatted,
            tier.file_size_limit_formatted,
            ", ".join(tier.features),
        )
    console.print(table)


def main():
    """Main CLI entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n❌ Operation cancelled by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
