"""
Basic usage example for chunkvault.
"""

from chunkvault import Config, StorageZone, open_vault
from chunkvault.storage import compress_data, decompress_data

ADMIN = "GADMIN"

# Open (or create) a vault backed by a snapshot file
print("Opening vault...")
vault = open_vault("vault.db", config=Config(bloom_hash="content"))
if not vault.is_initialized:
    vault.initialize(ADMIN)
print("Vault ready!")

# Store a caller-compressed record in the hot zone
profile = b'{"user": "U001", "tier": "captain", "missions": [1, 2, 3]}'
meta = vault.put("Users", "U001", compress_data(profile), caller=ADMIN)
print(f"\nStored Users/U001: {meta.compressed_size} bytes (est. original {meta.original_size})")

# Archive data goes straight to the cold zone
vault.put_zone("Posts", "P001", compress_data(b"first post"), StorageZone.COLD, caller=ADMIN)

# Cheap probabilistic check, then the definitive one
print("\nChecking existence...")
for key in [("Users", "U001"), ("Users", "U999")]:
    print(f"  {key}: bloom={vault.bloom_check(*key)} has={vault.has(*key)}")

# Read back
print(f"\nUsers/U001: {decompress_data(vault.get('Users', 'U001')).decode()}")

# Record an incremental patch
version = vault.delta_update("Users", "U001", b'{"tier": "admiral"}', caller=ADMIN)
print(f"Users/U001 now at version {version} with {len(vault.get_deltas('Users', 'U001'))} delta(s)")

# Move the record to cold storage
vault.migrate_to_cold("Users", "U001", caller=ADMIN)

stats = vault.get_stats()
print(f"\nEntries: {stats.total_entries} (hot {stats.hot_entries}, cold {stats.cold_entries})")
print(f"Compression ratio: {stats.compression_ratio}%")
print(f"Invariant violations: {vault.validate_invariants() or 'none'}")
