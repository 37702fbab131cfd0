import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer

from pypogoplug.native import FileType, PogoFile, PogoplugClient, PogoplugError
from pypogoplug.render import file_size, render_demo_page

app = typer.Typer()


@contextmanager
def _api_errors() -> Iterator[None]:
    """Report client errors on stderr and exit non-zero."""
    try:
        yield
    except (PogoplugError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=1) from e


def _client(ctx: typer.Context) -> PogoplugClient:
    return ctx.obj["api"]


def _format_file(f: PogoFile) -> str:
    name = f"{f.name}/" if f.is_directory else f.name
    return f"{f.file_id}\t{file_size(f.size)}\t{name}"


@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = None,
    verbose: bool = False,
):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)
    ctx.ensure_object(dict)
    with _api_errors():
        ctx.obj["api"] = PogoplugClient.from_config(config)


@app.command()
def user(ctx: typer.Context):
    with _api_errors():
        info = _client(ctx).get_user()
    print(f"{info.user_id}\t{info.screen_name}\t{info.email}")


@app.command()
def devices(ctx: typer.Context):
    with _api_errors():
        found = _client(ctx).list_devices()
    for device in found:
        print(f"{device.device_id}\t{device.name}\t{device.version}")
        for service in device.services:
            first, second = service.space_figures
            print(
                f"  {service.service_id}\t{service.name}\t"
                f"{file_size(first)} / {file_size(second)}"
            )


@app.command()
def services(
    ctx: typer.Context,
    device_id: str | None = None,
    shared: bool | None = None,
):
    with _api_errors():
        found = _client(ctx).list_services(device_id=device_id, shared=shared)
    for service in found:
        status = "online" if service.online else "offline"
        print(f"{service.device_id}\t{service.service_id}\t{service.name}\t{status}")


@app.command()
def ls(
    ctx: typer.Context,
    device_id: str,
    service_id: str,
    parent_id: str | None = None,
    space_id: str | None = None,
    page_offset: int | None = None,
    max_count: int | None = None,
    sort: str | None = None,
):
    with _api_errors():
        files = _client(ctx).list_files(
            device_id,
            service_id,
            space_id=space_id,
            parent_id=parent_id,
            page_offset=page_offset,
            max_count=max_count,
            sort_crit=sort,
        )
    for f in files:
        print(_format_file(f))


@app.command()
def search(
    ctx: typer.Context,
    criteria: str,
    device_id: str,
    service_id: str,
    page_offset: int | None = None,
    max_count: int | None = None,
    sort: str | None = None,
):
    with _api_errors():
        files = _client(ctx).search_files(
            criteria,
            device_id,
            service_id,
            page_offset=page_offset,
            max_count=max_count,
            sort_crit=sort,
        )
    for f in files:
        print(_format_file(f))


@app.command()
def stat(
    ctx: typer.Context,
    device_id: str,
    service_id: str,
    file_id: str | None = None,
    path: str | None = None,
):
    with _api_errors():
        f = _client(ctx).get_file(device_id, service_id, file_id=file_id, path=path)
    print(_format_file(f))


@app.command()
def create(
    ctx: typer.Context,
    device_id: str,
    service_id: str,
    filename: str,
    file_type: int = FileType.FILE.value,
    parent_id: str | None = None,
    space_id: str | None = None,
):
    with _api_errors():
        f = _client(ctx).create_file(
            device_id,
            service_id,
            filename,
            FileType(file_type),
            space_id=space_id,
            parent_id=parent_id,
        )
    print(f.file_id)


@app.command()
def mkdir(
    ctx: typer.Context,
    device_id: str,
    service_id: str,
    name: str,
    parent_id: str | None = None,
):
    with _api_errors():
        f = _client(ctx).create_file(
            device_id, service_id, name, FileType.DIRECTORY, parent_id=parent_id
        )
    print(f.file_id)


@app.command()
def rm(ctx: typer.Context, device_id: str, service_id: str, file_id: str):
    with _api_errors():
        _client(ctx).remove_file(device_id, service_id, file_id)


@app.command()
def demo(
    ctx: typer.Context,
    device_id: str,
    service_id: str,
    output: Path | None = None,
):
    with _api_errors():
        client = _client(ctx)
        page = render_demo_page(
            client.list_devices(), client.list_files(device_id, service_id)
        )
    if output is None:
        print(page)
    else:
        output.write_text(page)
        logging.info(f"Wrote demo page to {output}")


if __name__ == "__main__":
    app()
