import json
from pathlib import Path
import click
from autofig_core.catalog import MappingActionCatalog, default_catalog
from autofig_core.protocol import SAFE_QR_CAPACITY
from .logic import verify_payload, verify_shard

def _emit(result: dict) -> None:
    click.echo(json.dumps(result, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
    if result["status"] != "PASS":
        raise SystemExit(1)

@click.group()
def main():
    pass

@main.command("payload")
@click.argument("text")
@click.option("--capacity", type=click.IntRange(min=1), default=SAFE_QR_CAPACITY, show_default=True)
@click.option("--catalog", "catalog_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Action-group JSON used to label actions")
def payload_cmd(text: str, capacity: int, catalog_path: Path | None):
    if catalog_path is None:
        catalog = default_catalog()
    else:
        groups = json.loads(catalog_path.read_text(encoding="utf-8"))
        catalog = MappingActionCatalog.from_action_groups(groups.get("actionGroups", groups))
    _emit(verify_payload(text, capacity, catalog))

@main.command("shard")
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
def shard_cmd(path: Path):
    _emit(verify_shard(path))

if __name__ == "__main__":
    main()
