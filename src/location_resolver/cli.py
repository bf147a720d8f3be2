"""
Location Resolver — CLI Entry Point
====================================
Installed as the ``geo-locate`` command via ``pyproject.toml``.

Usage:
    geo-locate --provider osm --email ops@example.com suggest "Marszałkowska 1, Warszawa"
    geo-locate --provider locationiq --api-key pk.xxx resolve R:2828
    geo-locate --provider google batch --input data/addresses.csv \\
               --output output/normalized.csv --query-col address
"""

from __future__ import annotations

import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

import click

from location_resolver.base_tool import configure_logging
from location_resolver.batch import BatchLocationNormalizer
from location_resolver.config import GeocodeSettings, configure_location_provider
from location_resolver.exceptions import LocationResolverError
from location_resolver.models import PROVIDER_GOOGLE, PROVIDER_LOCATIONIQ, PROVIDER_OSM
from location_resolver.service import LocationService
from location_resolver.text_repair import replace_surrogates


def _echo_json(data: Any) -> None:
    click.echo(replace_surrogates(json.dumps(data, indent=2, ensure_ascii=False)))


def _fail(exc: LocationResolverError) -> None:
    click.echo(f"Error: {exc.message}", err=True)
    sys.exit(1)


@click.group(
    name="geo-locate",
    help="Autocomplete and normalize addresses via Google, Nominatim or LocationIQ.",
)
@click.option(
    "--provider",
    type=click.Choice([PROVIDER_LOCATIONIQ, PROVIDER_GOOGLE, PROVIDER_OSM], case_sensitive=False),
    default=None,
    help="Provider to use.  Defaults to LOCATION_PROVIDER or locationiq.",
)
@click.option(
    "--api-key",
    default=None,
    help="API key for the selected provider.  Falls back to LOCATIONIQ_API_KEY "
         "or GOOGLE_MAPS_API_KEY.",
)
@click.option("--endpoint", default=None, help="Override the provider's base URL.")
@click.option(
    "--email",
    default=None,
    help="Contact address sent to Nominatim (ignored by other providers).",
)
@click.option(
    "--user-agent",
    default=None,
    help="User-Agent sent to Nominatim (ignored by other providers).",
)
@click.option("--timeout", default=None, type=float, help="Per-request timeout in seconds.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def main(
    ctx: click.Context,
    provider: str | None,
    api_key: str | None,
    endpoint: str | None,
    email: str | None,
    user_agent: str | None,
    timeout: float | None,
    verbose: bool,
) -> None:
    """CLI entry point — merges options over environment settings."""
    configure_logging(verbose)

    settings = GeocodeSettings.from_env()
    if provider:
        settings = replace(settings, provider=provider.lower())
    overrides: dict[str, Any] = {}
    if timeout:
        overrides["timeout"] = timeout
    if settings.provider == PROVIDER_GOOGLE:
        if api_key:
            overrides["google_api_key"] = api_key
        if endpoint:
            overrides["google_endpoint"] = endpoint
    elif settings.provider == PROVIDER_OSM:
        if endpoint:
            overrides["osm_endpoint"] = endpoint
        if email:
            overrides["osm_email"] = email
        if user_agent:
            overrides["osm_user_agent"] = user_agent
    else:
        if api_key:
            overrides["locationiq_api_key"] = api_key
        if endpoint:
            overrides["locationiq_endpoint"] = endpoint
    settings = replace(settings, **overrides)

    ctx.obj = LocationService(configure_location_provider(settings))


@main.command(help="Print autocomplete suggestions for QUERY as JSON.")
@click.argument("query")
@click.pass_obj
def suggest(service: LocationService, query: str) -> None:
    try:
        suggestions = service.suggest_locations(query)
    except LocationResolverError as exc:
        _fail(exc)
        return
    _echo_json([s.to_dict() for s in suggestions])


@main.command(help="Resolve REFERENCE and print the normalized location as JSON.")
@click.argument("reference")
@click.option("--selected-text", default="", help="Suggestion text the user picked.")
@click.pass_obj
def resolve(service: LocationService, reference: str, selected_text: str) -> None:
    try:
        location = service.normalize_location(reference, selected_text)
    except LocationResolverError as exc:
        _fail(exc)
        return
    _echo_json(location.to_dict())


@main.command(help="Normalize every query in a CSV file and write the results as CSV.")
@click.option(
    "--input", "-i", "input_path",
    required=True,
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
    help="Path to the input CSV file.",
)
@click.option(
    "--output", "-o", "output_path",
    required=True,
    type=click.Path(file_okay=True, dir_okay=False, path_type=Path),
    help="Path for the output CSV file.",
)
@click.option(
    "--query-col",
    default="address",
    show_default=True,
    help="CSV column containing address queries.",
)
@click.pass_context
def batch(ctx: click.Context, input_path: Path, output_path: Path, query_col: str) -> None:
    tool = BatchLocationNormalizer(
        input_path=input_path,
        output_path=output_path,
        service=ctx.obj,
        query_col=query_col,
        verbose=bool(ctx.parent and ctx.parent.params.get("verbose")),
    )
    try:
        tool.run()
    except LocationResolverError as exc:
        _fail(exc)
        return
    success = sum(1 for r in tool.results if r.success)
    click.echo(f"\nCSV written to: {output_path}")
    click.echo(f"Normalized: {success}/{len(tool.results)} queries successfully.")


if __name__ == "__main__":
    main()
