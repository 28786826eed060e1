"""Command-line interface for s3-datastore.

This module provides a CLI over a datastore living at an
``s3://bucket/namespace`` path.

Commands:
    - open: Check the bucket is reachable and initialize the namespace
    - put: Store a value under a key
    - get: Print the value stored under a key
    - has: Report whether a key holds a value
    - delete: Remove the value stored under a key
    - query: List keys (and optionally values) under a prefix
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from . import __version__
from .core.exceptions import NotFoundError
from .datastore import Query, S3Datastore
from .key import Key
from .objectstorage import S3ClientConfig

app = typer.Typer(
    name="s3-datastore",
    help="Key-value datastore backed by an S3-compatible bucket.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"s3-datastore {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
) -> None:
    """
    S3-Datastore: a key-value datastore inside an S3 bucket.

    Every command takes the datastore location as s3://bucket/namespace.
    """
    pass


StorePathArgument = Annotated[
    str, typer.Argument(help="Datastore location as s3://bucket/namespace")
]
KeyArgument = Annotated[str, typer.Argument(help="Datastore key, e.g. /blocks/abc")]
AccessKeyOption = Annotated[
    Optional[str], typer.Option("--access-key-id", help="AWS access key ID")
]
SecretKeyOption = Annotated[
    Optional[str], typer.Option("--secret-access-key", help="AWS secret access key")
]
SessionTokenOption = Annotated[
    Optional[str], typer.Option("--session-token", help="AWS session token")
]
RegionOption = Annotated[str, typer.Option("--region", help="AWS region name")]
EndpointOption = Annotated[
    Optional[str], typer.Option("--endpoint-url", help="Custom S3 endpoint URL")
]
ProfileOption = Annotated[
    Optional[str], typer.Option("--aws-profile", help="AWS CLI profile name")
]
CreateIfMissingOption = Annotated[
    bool,
    typer.Option(
        "--create-if-missing", help="Create the bucket on the first write if missing"
    ),
]


def _create_datastore(
    store_path: str,
    access_key_id: Optional[str] = None,
    secret_access_key: Optional[str] = None,
    session_token: Optional[str] = None,
    region_name: str = "us-east-1",
    endpoint_url: Optional[str] = None,
    aws_profile: Optional[str] = None,
    create_if_missing: bool = False,
) -> S3Datastore:
    """Create the datastore addressed by ``store_path``."""
    config = S3ClientConfig(
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        session_token=session_token,
        region_name=region_name,
        endpoint_url=endpoint_url,
        aws_profile=aws_profile,
    )
    return S3Datastore.from_s3_path(
        store_path, config, create_if_missing=create_if_missing
    )


@app.command("open")
def open_cmd(
    store_path: StorePathArgument,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointOption = None,
    aws_profile: ProfileOption = None,
    create_if_missing: CreateIfMissingOption = False,
) -> None:
    """
    Check the bucket is reachable and initialize the namespace if needed.

    Example:
        s3-datastore open s3://bucket/.ipfs/datastore --create-if-missing
    """
    try:
        store = _create_datastore(
            store_path,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            region_name=region_name,
            endpoint_url=endpoint_url,
            aws_profile=aws_profile,
            create_if_missing=create_if_missing,
        )
        store.open()
        typer.echo(f"✓ Datastore ready: {store_path}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("put")
def put_cmd(
    store_path: StorePathArgument,
    key: KeyArgument,
    value: Annotated[
        Optional[str], typer.Argument(help="Value to store (UTF-8 text)")
    ] = None,
    file: Annotated[
        Optional[Path],
        typer.Option("--file", "-f", help="Read the value from this file instead"),
    ] = None,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointOption = None,
    aws_profile: ProfileOption = None,
    create_if_missing: CreateIfMissingOption = False,
) -> None:
    """
    Store a value under a key.

    Examples:
        s3-datastore put s3://bucket/ns /greeting hello
        s3-datastore put s3://bucket/ns /blocks/abc --file block.bin
    """
    try:
        if (value is None) == (file is None):
            raise ValueError("Provide exactly one of VALUE or --file")

        data = file.read_bytes() if file is not None else value.encode("utf-8")

        store = _create_datastore(
            store_path,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            region_name=region_name,
            endpoint_url=endpoint_url,
            aws_profile=aws_profile,
            create_if_missing=create_if_missing,
        )
        store.put(Key(key), data)
        typer.echo(f"Stored {len(data):,} bytes under {Key(key)}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("get")
def get_cmd(
    store_path: StorePathArgument,
    key: KeyArgument,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """
    Print the value stored under a key.

    Example:
        s3-datastore get s3://bucket/ns /greeting
    """
    try:
        store = _create_datastore(
            store_path,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            region_name=region_name,
            endpoint_url=endpoint_url,
            aws_profile=aws_profile,
        )
        value = store.get(Key(key))
        typer.echo(value or b"", nl=False)

    except NotFoundError:
        typer.echo(f"Error: key not found: {Key(key)}", err=True)
        raise typer.Exit(1)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("has")
def has_cmd(
    store_path: StorePathArgument,
    key: KeyArgument,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """
    Report whether a key holds a value; exits 1 when it does not.

    Example:
        s3-datastore has s3://bucket/ns /greeting
    """
    try:
        store = _create_datastore(
            store_path,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            region_name=region_name,
            endpoint_url=endpoint_url,
            aws_profile=aws_profile,
        )
        found = store.has(Key(key))

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if found:
        typer.echo(f"✓ {Key(key)} exists")
    else:
        typer.echo(f"✗ {Key(key)} does not exist", err=True)
        raise typer.Exit(1)


@app.command("delete")
def delete_cmd(
    store_path: StorePathArgument,
    key: KeyArgument,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """
    Remove the value stored under a key.

    Example:
        s3-datastore delete s3://bucket/ns /greeting
    """
    try:
        store = _create_datastore(
            store_path,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            region_name=region_name,
            endpoint_url=endpoint_url,
            aws_profile=aws_profile,
        )
        store.delete(Key(key))
        typer.echo(f"Deleted {Key(key)}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("query")
def query_cmd(
    store_path: StorePathArgument,
    prefix: Annotated[
        Optional[str], typer.Option("--prefix", help="Only keys starting with this")
    ] = None,
    keys_only: Annotated[
        bool, typer.Option("--keys-only", help="Do not fetch values")
    ] = False,
    limit: Annotated[
        Optional[int], typer.Option("--limit", help="Maximum number of entries")
    ] = None,
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """
    List keys under a prefix, with value sizes unless --keys-only is given.

    Examples:
        s3-datastore query s3://bucket/ns --prefix /blocks --keys-only
        s3-datastore query s3://bucket/ns --limit 10
    """
    try:
        store = _create_datastore(
            store_path,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            region_name=region_name,
            endpoint_url=endpoint_url,
            aws_profile=aws_profile,
        )

        count = 0
        for entry in store.query(Query(prefix=prefix, keys_only=keys_only, limit=limit)):
            count += 1
            if keys_only:
                typer.echo(str(entry.key))
            else:
                size = len(entry.value) if entry.value is not None else 0
                typer.echo(f"{entry.key}\t{size:,} bytes")

        if count == 0:
            typer.echo("No keys found.", err=True)

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
