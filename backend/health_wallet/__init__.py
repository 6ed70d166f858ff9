"""Health wallet: medical report ingestion, vital extraction and report sharing."""
