"""
Main CLI entry point for chunkvault.
"""

import json
import logging
from dataclasses import asdict
from typing import List

import click
import zstandard as zstd

from chunkvault.core.contracts import ChunkMeta, CompressionAlgo, Config, IndexEntry, StorageZone
from chunkvault.core.errors import VaultError
from chunkvault.storage.compression import decode_payload, encode_payload
from chunkvault.vault import open_vault

ZONES = click.Choice([zone.value for zone in StorageZone])
CODECS = click.Choice([algo.value for algo in CompressionAlgo])


def meta_to_dict(meta: ChunkMeta) -> dict:
    """Plain JSON-friendly view of a metadata record."""
    data = asdict(meta)
    data["compression"] = meta.compression.value
    data["zone"] = meta.zone.value
    return data


def index_to_rows(entries: List[IndexEntry]) -> List[dict]:
    return [
        {"id": e.id, "zone": e.zone.value, "compressed_size": e.compressed_size, "version": e.version}
        for e in entries
    ]


class VaultContext:
    """Holds the opened vault and the calling principal for subcommands."""

    def __init__(self, db: str, caller: str, bloom_hash: str):
        self.db = db
        self.caller = caller
        self.config = Config(bloom_hash=bloom_hash)
        self._vault = None

    @property
    def vault(self):
        if self._vault is None:
            self._vault = open_vault(self.db, config=self.config)
        return self._vault


pass_ctx = click.make_pass_decorator(VaultContext)


class VaultGroup(click.Group):
    """Turns VaultError into a clean CLI error instead of a traceback."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except VaultError as e:
            raise click.ClickException(str(e)) from e


@click.group(cls=VaultGroup)
@click.option("--db", envvar="CHUNKVAULT_DB", default="vault.db", show_default=True, type=click.Path(dir_okay=False), help="Ledger snapshot file")
@click.option("--caller", envvar="CHUNKVAULT_CALLER", default=None, help="Calling principal for write commands")
@click.option("--bloom-hash", type=click.Choice(["length", "content"]), default="length", help="Bloom hash mode used by init")
@click.option("--verbose", "-v", is_flag=True, help="Log vault events to stderr")
@click.pass_context
def cli(ctx, db, caller, bloom_hash, verbose):
    """chunkvault - compressed key-value store with Bloom index and hot/cold zones."""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")
    ctx.obj = VaultContext(db, caller, bloom_hash)


@cli.command()
@click.argument("admin")
@pass_ctx
def init(obj, admin):
    """Initialize the vault with an administrator principal."""
    obj.vault.initialize(admin)
    click.echo(f"Initialized {obj.db} (admin: {admin})")


@cli.command()
@click.argument("collection")
@click.argument("chunk_id")
@click.argument("source", type=click.File("rb"))
@click.option("--zone", type=ZONES, default=StorageZone.HOT.value, show_default=True)
@click.option("--codec", type=CODECS, default=CompressionAlgo.ZSTD.value, show_default=True, help="Caller-side encoding applied before storing")
@pass_ctx
def put(obj, collection, chunk_id, source, zone, codec):
    """Store SOURCE (use - for stdin) under COLLECTION/CHUNK_ID."""
    algo = CompressionAlgo(codec)
    try:
        data = encode_payload(source.read(), algo, level=obj.config.zstd_level)
    except ValueError as e:
        raise click.BadParameter(f"not a JSON document ({e})", param_hint="SOURCE") from e
    meta = obj.vault.put_zone(collection, chunk_id, data, StorageZone(zone), caller=obj.caller, compression=algo)
    click.echo(f"Stored {collection}/{chunk_id}: {meta.compressed_size} bytes ({algo.value}, {zone})")


@cli.command()
@click.argument("collection")
@click.argument("chunk_id")
@click.option("--output", "-o", type=click.File("wb"), default="-", help="Destination (default stdout)")
@click.option("--decode/--raw", default=True, help="Undo the caller-side encoding recorded in metadata")
@pass_ctx
def get(obj, collection, chunk_id, output, decode):
    """Write the payload of COLLECTION/CHUNK_ID."""
    vault = obj.vault
    data = vault.get(collection, chunk_id)
    meta = vault.get_meta(collection, chunk_id)
    if decode and meta is not None:
        try:
            data = decode_payload(data, meta.compression)
        except zstd.ZstdError as e:
            raise click.ClickException(
                f"{collection}/{chunk_id} is tagged {meta.compression.value} but does not decode ({e}); use --raw"
            ) from e
    output.write(data)


@cli.command()
@click.argument("collection")
@click.argument("chunk_id")
@pass_ctx
def meta(obj, collection, chunk_id):
    """Show metadata of COLLECTION/CHUNK_ID as JSON."""
    record = obj.vault.get_meta(collection, chunk_id)
    click.echo(json.dumps(meta_to_dict(record) if record else None, indent=2))


@cli.command()
@click.argument("collection")
@click.argument("chunk_id")
@pass_ctx
def has(obj, collection, chunk_id):
    """Definitive existence check (exit code 1 if missing)."""
    exists = obj.vault.has(collection, chunk_id)
    click.echo("yes" if exists else "no")
    if not exists:
        click.get_current_context().exit(1)


@cli.command("bloom-check")
@click.argument("collection")
@click.argument("chunk_id")
@pass_ctx
def bloom_check(obj, collection, chunk_id):
    """Probabilistic existence check: 'maybe' or 'absent'."""
    click.echo("maybe" if obj.vault.bloom_check(collection, chunk_id) else "absent")


@cli.command()
@click.argument("collection")
@click.argument("chunk_id")
@pass_ctx
def delete(obj, collection, chunk_id):
    """Delete COLLECTION/CHUNK_ID."""
    existed = obj.vault.delete(collection, chunk_id, caller=obj.caller)
    click.echo(f"Deleted {collection}/{chunk_id}" if existed else f"No entry {collection}/{chunk_id}")


@cli.command()
@click.argument("collection")
@click.argument("chunk_id")
@click.argument("patch", type=click.File("rb"))
@pass_ctx
def delta(obj, collection, chunk_id, patch):
    """Append PATCH to the delta log of COLLECTION/CHUNK_ID."""
    version = obj.vault.delta_update(collection, chunk_id, patch.read(), caller=obj.caller)
    click.echo(f"{collection}/{chunk_id} now at version {version}")


@cli.command()
@click.argument("collection")
@click.argument("chunk_id")
@pass_ctx
def deltas(obj, collection, chunk_id):
    """List delta patches (sizes and hex) of COLLECTION/CHUNK_ID."""
    patches = obj.vault.get_deltas(collection, chunk_id)
    output = [{"seq": i, "size": len(p), "hex": p.hex()} for i, p in enumerate(patches, 1)]
    click.echo(json.dumps(output, indent=2))


@cli.command()
@click.argument("collection")
@click.argument("chunk_id")
@click.option("--to", "target", type=ZONES, default=StorageZone.COLD.value, show_default=True)
@pass_ctx
def migrate(obj, collection, chunk_id, target):
    """Move COLLECTION/CHUNK_ID to another zone."""
    vault = obj.vault
    if StorageZone(target) == StorageZone.COLD:
        moved = vault.migrate_to_cold(collection, chunk_id, caller=obj.caller)
    else:
        moved = vault.migrate_to_hot(collection, chunk_id, caller=obj.caller)
    click.echo(f"Migrated {collection}/{chunk_id} to {target}" if moved else "No change")


@cli.command()
@click.argument("collection")
@click.option("--format", "output_format", default="text", type=click.Choice(["text", "json"]))
@pass_ctx
def index(obj, collection, output_format):
    """List the collection index of COLLECTION."""
    rows = index_to_rows(obj.vault.get_index(collection))
    if output_format == "json":
        click.echo(json.dumps(rows, indent=2))
        return
    for row in rows:
        click.echo(f"{row['id']}\t{row['zone']}\t{row['compressed_size']}\tv{row['version']}")


@cli.command()
@click.option("--format", "output_format", default="text", type=click.Choice(["text", "json"]))
@pass_ctx
def stats(obj, output_format):
    """Show storage statistics."""
    current = obj.vault.get_stats()
    if output_format == "json":
        click.echo(json.dumps(asdict(current), indent=2))
        return
    click.echo(f"Entries: {current.total_entries} (hot {current.hot_entries}, cold {current.cold_entries})")
    click.echo(f"Bytes stored: {current.total_bytes_stored}")
    click.echo(f"Bytes original (est.): {current.total_bytes_original}")
    click.echo(f"Compression ratio: {current.compression_ratio}%")
    click.echo(f"Bloom FPR (expected): {current.bloom_false_positive_rate / 10:.1f}%")


@cli.command()
@click.argument("collection", required=False)
@click.argument("chunk_id", required=False)
@pass_ctx
def verify(obj, collection, chunk_id):
    """Verify one chunk's checksum, or all vault invariants when no key is given."""
    vault = obj.vault
    if collection and chunk_id:
        ok = vault.verify(collection, chunk_id)
        click.echo("ok" if ok else "checksum mismatch or missing entry")
        if not ok:
            click.get_current_context().exit(1)
        return

    errors = vault.validate_invariants()
    for error in errors:
        click.echo(error)
    if errors:
        click.get_current_context().exit(1)
    click.echo("ok")


@cli.command()
@click.option("--keys", "num_keys", default=500, type=int, help="Number of keys to insert")
@click.option("--probes", "num_probes", default=2000, type=int, help="Number of never-inserted keys to probe")
@click.option("--hash", "bloom_hash", default="length", type=click.Choice(["length", "content"]))
@click.option("--report-json", type=click.Path(), help="Write JSON report to file")
def benchmark(num_keys, num_probes, bloom_hash, report_json):
    """Measure Bloom filter false positives and lookup latency in memory."""
    from chunkvault.benchmarks.bloom import run_bloom_benchmarks

    results = run_bloom_benchmarks(num_keys, num_probes, bloom_hash, report_json_path=report_json)

    click.echo("=== Bloom Benchmarks ===")
    click.echo(f"Keys inserted: {results['keys_inserted']} (hash: {bloom_hash})")
    click.echo(f"Fill ratio: {results['fill_ratio']:.4f}")
    click.echo(f"False positives: {results['false_positives']}/{results['probes']} ({results['empirical_fpr']:.2%})")
    click.echo(f"False negatives: {results['false_negatives']}")
    click.echo(
        f"bloom_check P50/P95: {results['bloom_check_latency']['p50']:.3f} / {results['bloom_check_latency']['p95']:.3f} ms"
    )
    click.echo(f"has P50/P95: {results['has_latency']['p50']:.3f} / {results['has_latency']['p95']:.3f} ms")
