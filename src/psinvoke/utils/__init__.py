"""Cross-cutting helpers usable from any layer (currently logging levels)."""
