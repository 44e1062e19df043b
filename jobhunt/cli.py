"""Command-line interface for jobhunt."""
import logging
import sys
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import Config, get_config
from .core import ScrapeReport, scrape_all
from .database import Database
from .errors import ScrapeError
from .fetchers import Fetcher
from .filters import JobFilter, create_filter_from_config
from .repl import Repl
from .sites import SITES, get_site

console = Console()

SITE_CHOICES = [site.name for site in SITES]


def _setup_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level, logging.WARNING),
                        format="[%(levelname)s] %(message)s")


def _get_db(ctx: click.Context) -> Database:
    if 'db' not in ctx.obj:
        db_config = ctx.obj['config'].get_database_config()
        ctx.obj['db'] = Database(db_config['url'], echo=db_config['echo'])
    return ctx.obj['db']


def _build_filter(settings: dict, apply_filters: bool) -> Optional[JobFilter]:
    if not apply_filters:
        return None
    return create_filter_from_config(settings.get('filters') or {})


def _run_scrape(ctx: click.Context, site_names: Tuple[str, ...] = (),
                apply_filters: bool = True, keep_going: Optional[bool] = None,
                workers: Optional[int] = None) -> ScrapeReport:
    """Scrape the selected sites and replace the stored jobs."""
    config: Config = ctx.obj['config']
    scrape_config = config.get_scrape_config()
    if keep_going is None:
        keep_going = not scrape_config['fail_fast']
    if workers is None:
        workers = scrape_config['workers']

    sites = [get_site(name) for name in site_names] if site_names else list(SITES)

    with Fetcher(timeout=scrape_config['timeout']) as fetcher:
        report = scrape_all(
            sites,
            fetcher=fetcher,
            job_filter=_build_filter(ctx.obj['settings'], apply_filters),
            workers=workers,
            fail_fast=not keep_going,
        )

    _get_db(ctx).replace_jobs(report.jobs)
    return report


def _print_report(report: ScrapeReport) -> None:
    table = Table(title="Scrape Summary")
    table.add_column("Site", style="cyan")
    table.add_column("Scraped", style="green", justify="right")
    table.add_column("Status", style="blue")
    for site_id, count in report.counts.items():
        table.add_row(site_id.value, str(count), "ok")
    for site_id, error in report.errors.items():
        table.add_row(site_id.value, "-", f"[red]{escape(error.message)}[/red]")
    console.print(table)
    console.print(f"[green]Stored {len(report.jobs)} jobs.[/green]")


@click.group(invoke_without_command=True)
@click.option('--config', 'config_file', type=click.Path(), default=None,
              help='YAML file with filter settings (default: jobhunt.yml)')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str], verbose: bool):
    """jobhunt - scrape job sites into a local database and query it."""
    config = Config()
    _setup_logging('DEBUG' if verbose else config.get_log_level())
    try:
        settings = get_config(config_file)
    except (FileNotFoundError, RuntimeError) as e:
        raise click.ClickException(str(e))

    ctx.obj = {
        'config': config,
        'settings': settings,
    }

    if ctx.invoked_subcommand is None:
        ctx.invoke(repl)


@cli.command()
@click.pass_context
def repl(ctx: click.Context):
    """Populate the local database, then start the query shell."""
    console.print("[green]Populating local database. This shouldn't take long...[/green]")
    try:
        report = _run_scrape(ctx)
    except ScrapeError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)
    console.print(f"[green]Population completed successfully! Stored {len(report.jobs)} jobs.[/green]")

    def refresh() -> int:
        return len(_run_scrape(ctx).jobs)

    shell = Repl(
        _get_db(ctx),
        refresh,
        console=console,
        history_file=ctx.obj['config'].get_repl_config()['history_file'],
    )
    shell.run()


@cli.command()
@click.option('--site', 'site_names', multiple=True, type=click.Choice(SITE_CHOICES),
              help='Site to scrape (repeatable, default: all)')
@click.option('--apply-filters/--no-filters', default=True, help='Apply the title filter')
@click.option('--keep-going/--fail-fast', default=None,
              help='Keep scraping other sites when one fails')
@click.option('--workers', type=int, default=None, help='Number of sites scraped concurrently')
@click.pass_context
def scrape(ctx: click.Context, site_names: Tuple[str, ...], apply_filters: bool,
           keep_going: Optional[bool], workers: Optional[int]):
    """Scrape job sites and replace the stored jobs."""
    try:
        report = _run_scrape(ctx, site_names, apply_filters, keep_going, workers)
    except ScrapeError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)
    _print_report(report)
    if not report.ok:
        sys.exit(1)


@cli.command('list-sites')
def list_sites():
    """List the job sites that are scraped."""
    table = Table(title="Job Sites")
    table.add_column("Name", style="cyan")
    table.add_column("Pages", style="green", justify="right")
    table.add_column("URL", style="blue")
    for site in SITES:
        table.add_row(site.name, str(len(site.page_urls())), site.url)
    console.print(table)


@cli.command()
@click.option('--title', help='Filter by job title')
@click.option('--company', help='Filter by company name')
@click.option('--site', type=click.Choice(SITE_CHOICES), help='Filter by site')
@click.option('--location', help='Filter by location')
@click.option('--min-remuneration', type=int, help='Minimum upper salary bound in thousands')
@click.option('--limit', type=int, default=20, help='Maximum number of results to show')
@click.pass_context
def search(ctx: click.Context, title: Optional[str], company: Optional[str], site: Optional[str],
           location: Optional[str], min_remuneration: Optional[int], limit: int):
    """Search the stored jobs."""
    filters = {
        'title': title,
        'company': company,
        'site': site,
        'location': location,
        'min_remuneration': min_remuneration,
    }
    jobs = _get_db(ctx).search_jobs(filters=filters, limit=limit)

    if not jobs:
        console.print("[yellow]No jobs found matching your criteria[/yellow]")
        return

    table = Table(title="Search Results")
    table.add_column("Title", style="cyan")
    table.add_column("Company", style="green")
    table.add_column("Posted", style="yellow")
    table.add_column("Location", style="blue")
    table.add_column("Salary", style="magenta")
    table.add_column("Site", style="blue")
    table.add_column("Apply", style="yellow")

    for job in jobs:
        table.add_row(
            escape(job.title),
            escape(job.company),
            job.date_posted,
            escape(job.location),
            job.remuneration,
            job.site.value,
            escape(job.apply),
        )

    console.print(table)


def main():
    """Main entry point for the CLI."""
    cli()
