ERRORS = {
  "E_LAYOUT_MISSING": "Required file or directory missing",
  "E_MANIFEST_JSON": "Manifest JSON invalid",
  "E_INTEGRITY_MISMATCH": "Integrity root does not match manifest",
  "E_PARQUET_MAGIC": "Parquet file missing PAR1 magic bytes",
  "E_PAYLOAD_SYNTAX": "Payload is not a valid terse match line",
  "E_PAYLOAD_NONCANONICAL": "Payload does not re-encode to itself",
  "E_PAYLOAD_CAPACITY": "Payload exceeds QR capacity",
  "E_ROW_MISMATCH": "Payload table row disagrees with its payload",
}
