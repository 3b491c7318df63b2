"""Command-line interface for s3glob.

Commands:
    - list: Print every object matching the given glob patterns
"""

import asyncio
import json
from typing import Annotated, Optional

import typer

from . import __version__
from .core import settings
from .objectstorage import GlobStream, S3ClientConfig, S3ClientManager

app = typer.Typer(
    name="s3glob",
    help="Find S3 objects whose keys match shell-glob patterns.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"s3glob {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
) -> None:
    """
    s3glob: stream S3 objects matching glob patterns.
    """
    pass


def _format_entry(entry: dict, output_format: str) -> str:
    if output_format == "query":
        return json.dumps(entry, default=str, sort_keys=True)
    return f"s3://{entry['Bucket']}/{entry['Key']}"


async def _echo_matches(stream: GlobStream, output_format: str) -> int:
    """Print entries as they arrive and return how many were printed."""
    count = 0
    async for entry in stream:
        typer.echo(_format_entry(entry, output_format))
        count += 1
    return count


@app.command("list")
def list_cmd(
    patterns: Annotated[
        list[str],
        typer.Argument(
            help="Glob patterns, e.g. s3://bucket/logs/*.gz; prefix with ! to exclude"
        ),
    ],
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: 'object' or 'query'"),
    ] = settings.default_format,
    unique: Annotated[
        bool,
        typer.Option("--unique/--no-unique", help="Print each object only once"),
    ] = settings.default_unique,
    bucket: Annotated[
        Optional[str],
        typer.Option("--bucket", "-b", help="Default bucket for bare key patterns"),
    ] = None,
    high_water_mark: Annotated[
        int,
        typer.Option("--high-water-mark", help="Maximum keys requested per page"),
    ] = settings.default_high_water_mark,
    region_name: Annotated[
        str, typer.Option("--region", help="AWS region name")
    ] = "us-east-1",
    endpoint_url: Annotated[
        Optional[str], typer.Option("--endpoint-url", help="Custom S3 endpoint URL")
    ] = None,
    aws_profile: Annotated[
        Optional[str],
        typer.Option("--aws-profile", help="AWS CLI profile name"),
    ] = None,
) -> None:
    """
    List objects matching glob patterns.

    Examples:
        s3glob list 's3://bucket/logs/{2023,2024}/*.gz' '!**/tmp/*'
        s3glob list --bucket bucket 'data/*.csv' --format query
    """
    try:
        config = S3ClientConfig(
            region_name=region_name,
            endpoint_url=endpoint_url,
            aws_profile=aws_profile,
        )
        client = S3ClientManager(config).client

        request_params = {"Bucket": bucket} if bucket else {}
        stream = GlobStream(
            patterns,
            client=client,
            format=output_format,
            unique=unique,
            high_water_mark=high_water_mark,
            request_params=request_params,
        )

        count = asyncio.run(_echo_matches(stream, output_format))
        if count == 0:
            typer.echo("No matching objects found.", err=True)

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
